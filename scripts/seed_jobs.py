"""
Seed script — submits a variety of sample jobs for demo purposes.

Usage:
    python -m scripts.generate_sample_image
    python -m scripts.seed_jobs

This creates:
- 2 image conversions (PNG → JPG, PNG → WEBP) for owner "alice"
- 2 sleep jobs for owner "bob" (they'll get a "you're in queue" notice)
- 1 guaranteed-failure job (demos retry → terminal failure → dead-letter list)

Watch it drain:
    curl -H "X-Admin-Key: $ADMIN_API_KEY" http://localhost:8000/admin/status
"""

import os

import httpx

BASE_URL = "http://localhost:8000"
SAMPLE_IMAGE = os.path.abspath("sample_data/sample.png")


def seed():
    client = httpx.Client(base_url=BASE_URL, timeout=10.0)

    jobs = [
        {
            "owner_id": "alice",
            "job_type": "image_convert",
            "payload": {"input_path": SAMPLE_IMAGE, "target_format": "jpg", "quality": "high"},
        },
        {
            "owner_id": "alice",
            "job_type": "image_convert",
            "payload": {"input_path": SAMPLE_IMAGE, "target_format": "webp"},
        },
        {
            "owner_id": "bob",
            "job_type": "sleep",
            "payload": {"duration": 2.0},
        },
        {
            "owner_id": "bob",
            "job_type": "sleep",
            "payload": {"duration": 0.5},
        },
        {
            "owner_id": "carol",
            "job_type": "sleep",
            "max_attempts": 2,
            "payload": {"duration": 0.1, "fail_probability": 1.0},
        },
    ]

    print(f"Submitting {len(jobs)} jobs to {BASE_URL}...\n")

    for job in jobs:
        resp = client.post("/jobs/", json=job)
        resp.raise_for_status()
        data = resp.json()
        print(
            f"  [{job['job_type']}] owner={job['owner_id']} "
            f"position={data['position']} (id: {data['job_id'][:8]}...)"
        )

    print("\nDone! Jobs are now flowing through the queue.")
    print('Queue status:  curl -H "X-Admin-Key: $ADMIN_API_KEY" http://localhost:8000/admin/status')
    print("History:       curl http://localhost:8000/jobs/history")


if __name__ == "__main__":
    seed()
