"""
Throughput benchmark — measures end-to-end jobs/sec through the single-worker queue.

How it works:
1. Make sure every benchmark owner has enough credits (top up via /admin/credits)
2. Submit N short sleep jobs (0.01s each) spread across a few owners
3. Poll /admin/stats until processed + failed grows by N
4. Calculate: throughput = N / total_wall_clock_time

The jobs are tiny, so the number you get is dominated by the fixed
cool-down between jobs (QUEUE_COOLDOWN_SECONDS). With the default 1s
cool-down expect just under 1 job/sec; run the API with a smaller
cool-down to measure the queue's own overhead.
"""

import time

import httpx

BASE_URL = "http://localhost:8000"


class ThroughputBenchmark:

    def __init__(
        self,
        base_url: str = BASE_URL,
        num_jobs: int = 20,
        num_owners: int = 4,
        admin_key: str = "",
    ):
        self.base_url = base_url
        self.num_jobs = num_jobs
        self.num_owners = num_owners
        self.client = httpx.Client(timeout=30.0)
        self.admin_headers = {"X-Admin-Key": admin_key}

    def _owner(self, i: int) -> str:
        return f"bench-{i % self.num_owners}"

    def top_up_credits(self) -> None:
        """Open each owner's account and add enough paid credits for the whole run."""
        for i in range(self.num_owners):
            owner = self._owner(i)
            self.client.get(f"{self.base_url}/credits/{owner}").raise_for_status()
            resp = self.client.post(
                f"{self.base_url}/admin/credits",
                json={"owner_id": owner, "credits": self.num_jobs},
                headers=self.admin_headers,
            )
            resp.raise_for_status()

    def submit_jobs(self) -> list[str]:
        job_ids = []
        for i in range(self.num_jobs):
            resp = self.client.post(
                f"{self.base_url}/jobs/",
                json={
                    "owner_id": self._owner(i),
                    "job_type": "sleep",
                    "payload": {"duration": 0.01},  # 10ms, measures the queue rather than the job
                },
            )
            resp.raise_for_status()
            job_ids.append(resp.json()["job_id"])
        return job_ids

    def _get_done_count(self) -> int:
        stats = self.client.get(f"{self.base_url}/admin/stats", headers=self.admin_headers).json()
        return stats["processed"] + stats["failed"]

    def wait_for_completion(self, baseline: int, timeout: float = 600.0) -> float:
        """
        Poll until (processed+failed) increases by num_jobs from baseline.

        baseline is the done count BEFORE we submitted jobs, so we only
        wait for our batch to finish — not jobs from previous runs.
        """
        start = time.monotonic()
        target = baseline + self.num_jobs
        while time.monotonic() - start < timeout:
            if self._get_done_count() >= target:
                return time.monotonic() - start
            time.sleep(0.5)
        raise TimeoutError(f"Jobs didn't complete within {timeout}s")

    def run(self) -> dict:
        self.top_up_credits()
        baseline = self._get_done_count()
        self.submit_jobs()
        elapsed = self.wait_for_completion(baseline)

        stats = self.client.get(f"{self.base_url}/admin/stats", headers=self.admin_headers).json()
        return {
            "num_jobs": self.num_jobs,
            "num_owners": self.num_owners,
            "wall_clock_sec": round(elapsed, 3),
            "throughput_jobs_per_sec": round(self.num_jobs / elapsed, 2),
            "avg_processing_time_ms": stats["average_processing_time_ms"],
        }
