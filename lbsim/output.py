from __future__ import annotations
from pathlib import Path
from typing import Optional, Union


def normalize_policy_name(policy_name: str) -> str:
    """
    Normalize a policy name for use in filenames.
    Examples: "Round Robin" -> "Round_Robin"
              "Least Request" -> "Least_Request"
    """
    name = policy_name.strip().replace(" ", "_")
    name = name.replace("-", "_")
    name = name.replace("(", "")
    name = name.replace(")", "")
    return name.replace("=", "_")


class ImbalanceWriter:
    """Stream of per-tick imbalance values, one integer per line, one file per policy."""

    def __init__(self, policy_name: str, out_dir: Union[str, Path] = "results"):
        self.policy_name = policy_name
        self.path = Path(out_dir) / f"imbalance_{normalize_policy_name(policy_name)}.txt"
        self._fh = None

    def open(self) -> "ImbalanceWriter":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "w", encoding="utf-8")
        return self

    def write_tick(self, imbalance: int) -> None:
        if self._fh is None:
            raise RuntimeError(f"{self.path} is not open")
        self._fh.write(f"{int(imbalance)}\n")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "ImbalanceWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
