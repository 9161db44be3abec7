"""
Core simulation library for load-balancing policy comparison.
"""

from .config import SimConfig, ConfigError, POLICY_NAMES
from .upstream import CompletionRecord, UpstreamServer, Backend
from .proxy import ProxyNode, Frontend
from .simulator import LBSimulator
from .output import ImbalanceWriter, normalize_policy_name
from . import strategies

__all__ = [
    "SimConfig",
    "ConfigError",
    "POLICY_NAMES",
    "CompletionRecord",
    "UpstreamServer",
    "Backend",
    "ProxyNode",
    "Frontend",
    "LBSimulator",
    "ImbalanceWriter",
    "normalize_policy_name",
    "strategies",
]
