from __future__ import annotations

import sys
import argparse
from pathlib import Path
from typing import Dict, List, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lbsim import LBSimulator, ImbalanceWriter, POLICY_NAMES
from lbsim.config import CONCURRENCY, SERVICE_TIME

SMOOTH_WINDOW = 500
MAX_PLOTTED_TICKS = 20000


# ------------------- Single run -------------------
def run_policy(
    policy_name: str,
    proxy_count: int,
    backend_server_count: int,
    n_ticks: int,
    seed: int,
    concurrency: int,
    service_time: int,
    out_dir: Path,
) -> Tuple[Dict[str, float], np.ndarray]:
    """One isolated simulation: its own backend, proxies and generator."""
    with ImbalanceWriter(policy_name, out_dir) as writer:
        sim = LBSimulator(
            proxy_count,
            backend_server_count,
            policy_name,
            concurrency=concurrency,
            service_time=service_time,
            seed=seed,
            output=writer,
        )
        metrics = sim.run(n_ticks, verbose=False)
    metrics["imbalance_file"] = str(writer.path)
    return metrics, sim.imbalance_series()


# ------------------- Plotting -------------------
def plot_imbalance(series: Dict[str, np.ndarray], out_dir: Path, show: bool = False) -> Path:
    fig, ax = plt.subplots(figsize=(11, 6.5))
    colors = plt.cm.viridis(np.linspace(0.1, 0.85, max(len(series), 1)))
    for color, (name, imb) in zip(colors, series.items()):
        smoothed = pd.Series(imb[:MAX_PLOTTED_TICKS]).rolling(SMOOTH_WINDOW, min_periods=1).mean()
        ax.plot(smoothed.index + 1, smoothed.values, label=name, color=color, linewidth=2.0, alpha=0.9)
    ax.set_xlabel("Tick", fontsize=16, fontweight="semibold", color="#1f1f2e")
    ax.set_ylabel(f"Imbalance (rolling mean, {SMOOTH_WINDOW} ticks)", fontsize=16,
                  fontweight="semibold", color="#1f1f2e")
    ax.tick_params(axis="both", labelsize=13, colors="#2b2b3c", width=1.5)
    ax.legend(fontsize=13, loc="upper right", frameon=True, fancybox=True, framealpha=0.9)
    ax.grid(True, which="major", linestyle="--", linewidth=0.5, alpha=0.3, color="#7c8aa6")
    for spine in ["top", "right"]:
        ax.spines[spine].set_visible(False)
    ax.set_facecolor("#f4f6fb")
    fig.patch.set_facecolor("#eef1f7")
    fig.tight_layout()

    fig_dir = out_dir / "figures"
    fig_dir.mkdir(parents=True, exist_ok=True)
    out_file = fig_dir / "imbalance_comparison.jpg"
    fig.savefig(out_file, dpi=300, format="jpg")
    if show:
        plt.show()
    plt.close(fig)
    return out_file


# ------------------- Main program -------------------
def main(argv: List[str] = None) -> None:
    parser = argparse.ArgumentParser(description="Compare load-balancing policies on a simulated cluster")
    parser.add_argument("--proxies", type=int, default=10, help="Number of proxy servers (default: 10)")
    parser.add_argument("--servers", type=int, default=20, help="Number of upstream servers (default: 20)")
    parser.add_argument("--policy", type=str, default="all", choices=list(POLICY_NAMES) + ["all"],
                        help="Policy to simulate, or 'all' to compare every policy (default: all)")
    parser.add_argument("--ticks", type=int, default=100000, help="Number of simulated ticks (default: 100000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--concurrency", type=int, default=CONCURRENCY,
                        help=f"Requests processed at once per upstream server (default: {CONCURRENCY})")
    parser.add_argument("--service_time", type=int, default=SERVICE_TIME,
                        help=f"Ticks to serve one request (default: {SERVICE_TIME})")
    parser.add_argument("--n_jobs", type=int, default=-1, help="Number of parallel jobs, -1 means use all cores (default: -1)")
    parser.add_argument("--out_dir", type=str, default=str(ROOT / "results"), help="Output directory")
    parser.add_argument("--skip_plot", action="store_true", help="Skip plotting")
    args = parser.parse_args(argv)

    out_dir = Path(args.out_dir)
    policies = list(POLICY_NAMES) if args.policy == "all" else [args.policy]

    print(f"\n### proxies={args.proxies}, servers={args.servers}, concurrency={args.concurrency}, "
          f"service_time={args.service_time}, ticks={args.ticks}, seed={args.seed} ###")

    results = Parallel(n_jobs=args.n_jobs)(
        delayed(run_policy)(
            name,
            args.proxies,
            args.servers,
            args.ticks,
            args.seed,
            args.concurrency,
            args.service_time,
            out_dir,
        )
        for name in tqdm(policies, desc="Policies", ncols=80)
    )

    df = pd.DataFrame([m for m, _ in results]).set_index("policy")

    print("\n" + "=" * 60)
    print("Policy comparison".center(60))
    print("=" * 60)
    for name, row in df.iterrows():
        mean = "no data" if pd.isna(row["mean_latency"]) else f"{int(row['mean_latency'])}"
        tail = "no data" if pd.isna(row["tail_latency"]) else f"{int(row['tail_latency'])}"
        print(f"{name:>15s}: mean latency={mean}, tail latency={tail}, "
              f"avg imbalance={row['avg_imbalance']:.3f}, requests={int(row['requests'])}")

    out_dir.mkdir(parents=True, exist_ok=True)
    csv_file = out_dir / "policy_summary.csv"
    df.to_csv(csv_file)
    print(f"\nSummary saved to: {csv_file}")
    for name, row in df.iterrows():
        print(f"Imbalance stream for {name} saved to: {row['imbalance_file']}")

    if not args.skip_plot:
        series = {name: imb for name, (_, imb) in zip(policies, results)}
        fig_file = plot_imbalance(series, out_dir)
        print(f"Figure saved to: {fig_file}")


if __name__ == "__main__":
    main()
