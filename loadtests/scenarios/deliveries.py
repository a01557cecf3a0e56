"""Delivery lifecycle load test scenarios.

A stateful SequentialTaskSet walks one delivery from request to handover,
acting in turn as the business user, the administrator and the driver. A
second journey deliberately races two assignments on the same revision to
exercise the conflict path.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import delivered_actuals, delivery_data, user_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import Crew, DeliveryState


def _headers(user_id: str, role: str) -> dict:
    return {"X-Caller-Id": user_id, "X-Caller-Role": role}


def _register_crew(client) -> Crew:
    crew = Crew()
    for role, attr in (("ADMIN", "admin_id"), ("BUSINESS_USER", "business_id"), ("DRIVER", "driver_id")):
        resp = client.post("/users", json=user_data(role), name="POST /users")
        resp.raise_for_status()
        setattr(crew, attr, resp.json()["user_id"])
    return crew


class DeliveryLifecycleJourney(SequentialTaskSet):
    """Create -> Assign -> Accept -> On way -> Delivered -> History."""

    def on_start(self):
        self.crew = _register_crew(self.client)
        self.state = DeliveryState()

    @task
    def create_delivery(self):
        with self.client.post(
            "/deliveries",
            json=delivery_data(),
            headers=_headers(self.crew.business_id, "BUSINESS_USER"),
            catch_response=True,
            name="POST /deliveries",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.delivery_id = body["delivery_id"]
                self.state.revision = body["revision"]
            else:
                resp.failure(f"Create delivery failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def list_unassigned(self):
        self.client.get(
            "/deliveries?unassigned=true",
            headers=_headers(self.crew.admin_id, "ADMIN"),
            name="GET /deliveries?unassigned=true",
        )

    @task
    def assign_driver(self):
        with self.client.put(
            f"/deliveries/{self.state.delivery_id}/driver",
            json={"driver_id": self.crew.driver_id, "expected_revision": self.state.revision},
            headers=_headers(self.crew.admin_id, "ADMIN"),
            catch_response=True,
            name="PUT /deliveries/{id}/driver",
        ) as resp:
            if resp.status_code == 200:
                self.state.revision = resp.json()["revision"]
            else:
                resp.failure(f"Assign driver failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    def _move(self, status: str, **extra):
        with self.client.put(
            f"/deliveries/{self.state.delivery_id}/status",
            json={"status": status, "expected_revision": self.state.revision, **extra},
            headers=_headers(self.crew.driver_id, "DRIVER"),
            catch_response=True,
            name=f"PUT /deliveries/{{id}}/status [{status}]",
        ) as resp:
            if resp.status_code == 200:
                self.state.revision = resp.json()["revision"]
                self.state.current_status = status
            else:
                resp.failure(f"Move to {status} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def accept(self):
        self._move("ACCEPTED")

    @task
    def start_trip(self):
        self._move("ON_WAY")

    @task
    def hand_over(self):
        self._move("DELIVERED", **delivered_actuals())

    @task
    def read_history(self):
        with self.client.get(
            f"/deliveries/{self.state.delivery_id}/history",
            headers=_headers(self.crew.business_id, "BUSINESS_USER"),
            catch_response=True,
            name="GET /deliveries/{id}/history",
        ) as resp:
            if resp.status_code != 200 or len(resp.json()) != 4:
                resp.failure(f"Unexpected history: {resp.status_code} — {resp.text[:200]}")
        self.interrupt()


class AssignmentRaceJourney(SequentialTaskSet):
    """Two assignments on the same revision: exactly one may win."""

    def on_start(self):
        self.crew = _register_crew(self.client)
        self.second_driver = self.client.post("/users", json=user_data("DRIVER"), name="POST /users").json()[
            "user_id"
        ]

    @task
    def race(self):
        created = self.client.post(
            "/deliveries",
            json=delivery_data(),
            headers=_headers(self.crew.business_id, "BUSINESS_USER"),
            name="POST /deliveries",
        )
        if created.status_code != 201:
            self.interrupt()
        body = created.json()
        outcomes = []
        for driver_id in (self.crew.driver_id, self.second_driver):
            with self.client.put(
                f"/deliveries/{body['delivery_id']}/driver",
                json={"driver_id": driver_id, "expected_revision": body["revision"]},
                headers=_headers(self.crew.admin_id, "ADMIN"),
                catch_response=True,
                name="PUT /deliveries/{id}/driver [race]",
            ) as resp:
                outcomes.append(resp.status_code)
                # A lost race is the expected outcome for one of the two
                if resp.status_code == 409:
                    resp.success()
        if sorted(outcomes) != [200, 409]:
            raise AssertionError(f"Expected one winner and one conflict, got {outcomes}")
        self.interrupt()


class DeliveryUser(HttpUser):
    """Steady stream of complete delivery lifecycles."""

    wait_time = between(0.5, 2)
    tasks = [DeliveryLifecycleJourney]


class AssignmentRaceUser(HttpUser):
    """Conflict-path pressure on the assignment coordinator."""

    wait_time = between(1, 3)
    tasks = [AssignmentRaceJourney]
