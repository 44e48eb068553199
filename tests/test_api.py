from fastapi.testclient import TestClient

from src.booking.config import settings
from src.booking.errors import ResolutionError, SubmissionError
from src.booking.main import create_app
from src.booking.models.domain import CandidateLocation, Coordinates
from src.booking.services.session import BookingSession

PREFIX = settings.api_prefix


class DummyPlaces:
    async def search(self, query, country):
        return [CandidateLocation(place_id="p1", description=f"{query.title()}, Rwanda", main_text=query.title())]

    async def place_details(self, place_id):
        if place_id == "broken":
            raise ResolutionError("details unavailable")
        return Coordinates(lat=-1.95, lng=30.06, address="Kigali")


class DummyOSRM:
    def __init__(self, meters=12345.0, fail=False):
        self.meters = meters
        self.fail = fail

    async def distance_meters(self, origin, destination):
        if self.fail:
            raise ResolutionError("no route")
        return self.meters


class DummyBackend:
    def __init__(self, reject_with=None):
        self.reject_with = reject_with
        self.payloads = []

    async def create_assignment(self, payload):
        self.payloads.append(payload)
        if self.reject_with:
            raise SubmissionError(self.reject_with, status_code=409)
        return {"id": "A1", **payload}

    async def create_split_assignment(self, payload):
        self.payloads.append(payload)
        return [{"id": "A1"}, {"id": "A2"}]


def _client(osrm=None, backend=None):
    session = BookingSession(
        search_provider=DummyPlaces(),
        details_provider=DummyPlaces(),
        distance_provider=osrm or DummyOSRM(),
        submissions=backend,
    )
    return TestClient(create_app(session=session))


CARGO = {"cargo_id": "CG-1", "weight_kg": 1000, "volume": 10}
FLEET = [
    {"vehicle_id": "V500", "capacity_kg": 500},
    {"vehicle_id": "V600", "capacity_kg": 600},
    {"vehicle_id": "V3000", "capacity_kg": 3000},
]


def test_health_endpoint():
    with _client() as client:
        response = client.get(f"{PREFIX}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_recommend_picks_best_fitting_vehicle():
    with _client() as client:
        response = client.post(f"{PREFIX}/assignments/recommend", json={"cargo": CARGO, "vehicles": FLEET})

    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "full"
    assert body["vehicle_id"] == "V3000"
    assert body["suitable_count"] == 1


def test_recommend_split_when_nothing_fits():
    with _client() as client:
        response = client.post(f"{PREFIX}/assignments/recommend", json={"cargo": CARGO, "vehicles": FLEET[:2]})

    assert response.json()["mode"] == "split"
    assert response.json()["vehicle_id"] is None


def test_validate_reports_split_errors():
    payload = {
        "cargo": CARGO,
        "vehicles": FLEET,
        "assignment_type": "split",
        "driver_assignments": [
            {"driver_id": "D1", "vehicle_id": "V500", "weight_kg": 600, "volume": 5},
            {"driver_id": "D2", "vehicle_id": "V600", "weight_kg": 300, "volume": 5},
        ],
    }
    with _client() as client:
        response = client.post(f"{PREFIX}/assignments/validate", json=payload)

    body = response.json()
    assert body["valid"] is False
    assert body["errors"]["split_weight"] == "Total weight (900kg) must equal cargo weight (1000kg)"
    assert body["row_errors"] == [
        {"index": 0, "field": "capacity", "message": "Weight exceeds vehicle capacity (500kg)"}
    ]


def test_submit_split_assignment():
    backend = DummyBackend()
    payload = {
        "cargo": CARGO,
        "vehicles": FLEET,
        "assignment_type": "split",
        "driver_assignments": [
            {"driver_id": "D1", "vehicle_id": "V500", "weight_kg": 450, "volume": 4},
            {"driver_id": "D2", "vehicle_id": "V600", "weight_kg": 550, "volume": 6},
        ],
    }
    with _client(backend=backend) as client:
        response = client.post(f"{PREFIX}/assignments/submit", json=payload)

    assert response.status_code == 201
    assert response.json()["assignment_type"] == "split"
    assert len(backend.payloads) == 1
    assert len(backend.payloads[0]["driver_assignments"]) == 2


def test_submit_invalid_assignment_is_unprocessable():
    backend = DummyBackend()
    payload = {"cargo": CARGO, "vehicles": FLEET, "assignment_type": "full", "vehicle_id": "V500"}
    with _client(backend=backend) as client:
        response = client.post(f"{PREFIX}/assignments/submit", json=payload)

    assert response.status_code == 422
    errors = response.json()["detail"]["errors"]
    assert errors["driver_id"] == "This field is required"
    assert errors["vehicle_id"] == "Cargo weight exceeds vehicle capacity"
    assert backend.payloads == []


def test_submit_rejection_surfaces_backend_message():
    backend = DummyBackend(reject_with="Driver is not available on this date")
    payload = {"cargo": CARGO, "vehicles": FLEET, "assignment_type": "full", "driver_id": "D1", "vehicle_id": "V3000"}
    with _client(backend=backend) as client:
        response = client.post(f"{PREFIX}/assignments/submit", json=payload)

    assert response.status_code == 502
    assert response.json()["detail"] == "Driver is not available on this date"


def test_submit_without_backend_is_unavailable():
    payload = {"cargo": CARGO, "vehicles": FLEET, "driver_id": "D1", "vehicle_id": "V3000"}
    with _client() as client:
        response = client.post(f"{PREFIX}/assignments/submit", json=payload)

    assert response.status_code == 503


def test_location_search_and_details():
    with _client() as client:
        search = client.get(f"{PREFIX}/locations/search", params={"q": "kigali", "channel": "destination"})
        details = client.get(f"{PREFIX}/locations/p1")
        broken = client.get(f"{PREFIX}/locations/broken")

    assert search.status_code == 200
    assert search.json()["results"][0]["description"] == "Kigali, Rwanda"
    assert details.json() == {"lat": -1.95, "lng": 30.06, "address": "Kigali"}
    assert broken.status_code == 502


def test_short_location_query_returns_nothing():
    with _client() as client:
        response = client.get(f"{PREFIX}/locations/search", params={"q": "k"})

    assert response.json()["results"] == []


def test_distance_endpoint_reports_billable_distance():
    params = {"origin_lat": -1.94, "origin_lng": 30.06, "destination_lat": -1.96, "destination_lng": 30.11}
    with _client(osrm=DummyOSRM(meters=400)) as client:
        response = client.get(f"{PREFIX}/distance", params=params)

    body = response.json()
    assert body["distance_km"] == 0.4
    assert body["billable_km"] == 1.0
    assert body["notices"] == ["Distance calculated: 1.00 km"]


def test_distance_failure_is_reported_as_notice():
    params = {"origin_lat": -1.94, "origin_lng": 30.06, "destination_lat": -1.96, "destination_lng": 30.11}
    with _client(osrm=DummyOSRM(fail=True)) as client:
        response = client.get(f"{PREFIX}/distance", params=params)

    body = response.json()
    assert body["distance_km"] is None
    assert body["notices"] == ["Failed to calculate distance"]


def test_pricing_falls_back_without_backend():
    with _client() as client:
        response = client.post(f"{PREFIX}/pricing/estimate", json={"weight_kg": 10, "distance_km": 20})

    body = response.json()
    assert body["source"] == "fallback"
    assert body["cost"] == settings.global_rate_per_km * 20 + settings.global_rate_per_kg * 10
