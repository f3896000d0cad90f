"""Locust load test suite for the cold chain telemetry API.

Tests two user personas:
- DashboardViewer (80%): Polls latest readings, door board and sensor history
- ReportExporter (20%): Downloads spreadsheet reports and sensor paths

Sensors must exist first, see seed_data.py.

Target metrics:
- p95 latency < 200ms on dashboard reads
- p95 latency < 2s on report exports
"""

import os
import random
from datetime import datetime, timedelta, timezone

from locust import between, events, task
from locust.contrib.fasthttp import FastHttpUser

API_KEY = os.getenv("API_KEY", "")
SENSOR_COUNT = int(os.getenv("SEED_SENSORS", "50"))


# ==================== Test Data Generators ====================

def sensor_mac(index: int) -> str:
    """MAC of the index-th seeded sensor."""
    return "AA:BB:CC:{:02X}:{:02X}:{:02X}".format(
        (index >> 16) & 0xFF, (index >> 8) & 0xFF, index & 0xFF
    )


def random_mac() -> str:
    return sensor_mac(random.randint(1, SENSOR_COUNT))


def report_window(days: int) -> dict:
    """startDate/endDate query params covering the last ``days`` days."""
    end = datetime.now(timezone.utc)
    return {
        "startDate": (end - timedelta(days=days)).isoformat(),
        "endDate": end.isoformat(),
    }


def auth_headers() -> dict:
    return {"x-api-key": API_KEY} if API_KEY else {}


# ==================== User Classes ====================

class DashboardViewer(FastHttpUser):
    """Dashboard screen - polls the overview and opens sensor charts.

    Weight: 80% of traffic
    """

    weight = 8
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = auth_headers()

    @task(8)
    def view_latest_readings(self):
        self.client.get("/api/sensores/latest", headers=self.headers, name="GET /sensores/latest")

    @task(4)
    def view_door_board(self):
        self.client.get("/api/doors/latest", headers=self.headers, name="GET /doors/latest")

    @task(3)
    def view_sensor_history(self):
        period = random.choice(["1h", "24h", "7d"])
        self.client.get(
            f"/api/sensores/{random_mac()}?period={period}",
            headers=self.headers,
            name="GET /sensores/{mac}",
        )

    @task(1)
    def view_device_catalog(self):
        self.client.get("/api/dispositivos", headers=self.headers, name="GET /dispositivos")


class ReportExporter(FastHttpUser):
    """Operator exporting compliance spreadsheets.

    Weight: 20% of traffic
    """

    weight = 2
    wait_time = between(5, 15)

    def on_start(self):
        self.headers = auth_headers()

    @task(3)
    def download_report(self):
        params = {"mac": random_mac(), **report_window(random.choice([1, 7]))}
        with self.client.get(
            "/api/sensor/report",
            params=params,
            headers=self.headers,
            name="GET /sensor/report",
            catch_response=True,
        ) as response:
            # An empty window is a valid answer
            if response.status_code == 404:
                response.success()

    @task(1)
    def view_sensor_path(self):
        params = {"mac": random_mac(), **report_window(1)}
        self.client.get(
            "/api/sensor/coordinates",
            params=params,
            headers=self.headers,
            name="GET /sensor/coordinates",
        )


# ==================== Event Handlers ====================

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Print test configuration at start."""
    print("\n" + "="*80)
    print("Cold Chain Load Test Starting")
    print("="*80)
    print(f"Target host: {environment.host}")
    print(f"User classes: DashboardViewer (80%), ReportExporter (20%)")
    print(f"Sensors: {SENSOR_COUNT}")
    print("="*80 + "\n")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Print test summary at completion."""
    print("\n" + "="*80)
    print("Cold Chain Load Test Complete")
    print("="*80)

    stats = environment.stats
    print(f"Total requests: {stats.total.num_requests}")
    print(f"Total failures: {stats.total.num_failures}")
    print(f"Average response time: {stats.total.avg_response_time:.2f}ms")
    print(f"Requests/sec: {stats.total.total_rps:.2f}")

    if stats.total.num_requests > 0:
        print(f"\nResponse Time Percentiles:")
        print(f"  50th: {stats.total.get_response_time_percentile(0.5):.2f}ms")
        print(f"  95th: {stats.total.get_response_time_percentile(0.95):.2f}ms")
        print(f"  99th: {stats.total.get_response_time_percentile(0.99):.2f}ms")

    print("="*80 + "\n")
