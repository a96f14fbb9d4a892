"""Locust load tests for the consultation invoice API.

Target: a handful of reviewers paging through months, each page load fanning
out to Stripe and GoHighLevel. Summary and rates calls are local and cheap.

Usage:
    # Headless (CI-friendly)
    locust -f locustfile.py --headless -u 10 -r 2 -t 5m --csv results

    # Web UI
    locust -f locustfile.py
"""

import random
import uuid

from locust import HttpUser, between, task

SERVICE_TYPES = [
    "Initial Consultation",
    "Consultation",
    "Pathology Review",
    "Follow-up Consultation",
    "Repeat Script",
]


def _consultation(status: str) -> dict:
    return {
        "id": f"stripe_ch_{uuid.uuid4().hex[:12]}",
        "source": random.choice(["stripe", "gohighlevel"]),
        "patientName": "Load Test",
        "patientEmail": "",
        "serviceType": random.choice(SERVICE_TYPES),
        "amount": 100,
        "date": "2025-03-05T10:00:00Z",
        "status": status,
    }


class ReviewerUser(HttpUser):
    """Simulates a reviewer loading months and recomputing the invoice."""

    host = "http://localhost:8080"
    wait_time = between(1, 5)

    @task(5)
    def load_month(self):
        month = random.randint(1, 12)
        self.client.get(
            "/api/consultations",
            params={"year": 2025, "month": month},
            name="/api/consultations",
            timeout=30,
        )

    @task(10)
    def summarize(self):
        statuses = ["approved", "rejected", "pending"]
        self.client.post(
            "/api/summary",
            json={"consultations": [_consultation(random.choice(statuses)) for _ in range(40)]},
            name="/api/summary",
            timeout=5,
        )

    @task(2)
    def rates(self):
        self.client.get("/api/rates", name="/api/rates")

    @task(1)
    def health_check(self):
        self.client.get("/health", name="/health")
