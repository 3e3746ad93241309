"""
CLI entry point for running the throughput benchmark.

Usage:
    python -m benchmarks.run_benchmark                     # 20 jobs, 4 owners
    python -m benchmarks.run_benchmark --num-jobs 100      # more jobs
    python -m benchmarks.run_benchmark --owners 10

Prerequisites:
    the API must be running (uvicorn api.main:app), with Postgres and Redis up
"""

import argparse
import json
import os

from benchmarks.throughput import ThroughputBenchmark


def main():
    parser = argparse.ArgumentParser(description="Conversion Queue Throughput Benchmark")
    parser.add_argument(
        "--num-jobs", type=int, default=20,
        help="Number of jobs to submit (default: 20)",
    )
    parser.add_argument(
        "--owners", type=int, default=4,
        help="Number of distinct owners to spread jobs across (default: 4)",
    )
    parser.add_argument(
        "--base-url", type=str, default="http://localhost:8000",
        help="API base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--admin-key", type=str, default=os.environ.get("ADMIN_API_KEY", ""),
        help="Value for the X-Admin-Key header (default: $ADMIN_API_KEY)",
    )
    args = parser.parse_args()

    print("=== Conversion Queue Throughput Benchmark ===")
    print(f"Jobs: {args.num_jobs} | Owners: {args.owners}\n")

    bench = ThroughputBenchmark(
        base_url=args.base_url,
        num_jobs=args.num_jobs,
        num_owners=args.owners,
        admin_key=args.admin_key,
    )
    result = bench.run()

    print("=== RESULTS ===")
    print(json.dumps(result, indent=2))
    print(
        "\n{:>10.3f}s wall clock, {:>8.2f} jobs/s".format(
            result["wall_clock_sec"], result["throughput_jobs_per_sec"]
        )
    )


if __name__ == "__main__":
    main()
