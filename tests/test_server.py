import pytest

from authcompass.core.config import Settings
from authcompass.etl.aggregate import ScoredBatch
from authcompass.jobs import server
from authcompass.vendors.foursquare import FoursquareError


@pytest.fixture
def settings(monkeypatch):
    value = Settings(foursquare_api_key="key")
    monkeypatch.setattr(server, "get_settings", lambda: value)
    return value


@pytest.fixture
def client(settings):
    return server.app.test_client()


def test_health_endpoint(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "ok"
    assert body["api_key_configured"] is True


def test_search_requires_query(client):
    assert client.get("/api/places/search").status_code == 400
    assert client.get("/api/places/search?query=%20").status_code == 400


def test_search_passes_defaults_and_shapes_response(monkeypatch, client, settings, make_scored):
    captured = {}

    def fake_run_search(query, lat, lng, limit, passed_settings):
        captured.update(query=query, lat=lat, lng=lng, limit=limit)
        return ScoredBatch(places=[make_scored("a", 90)])

    monkeypatch.setattr(server, "run_search", fake_run_search)

    response = client.get("/api/places/search?query=coffee&lat=bad&limit=-2")

    assert response.status_code == 200
    assert captured == {"query": "coffee", "lat": settings.default_lat, "lng": settings.default_lng, "limit": 5}
    body = response.get_json()
    assert body["success"] is True
    assert body["count"] == 1
    assert body["places"][0]["authenticityScore"] == 90
    assert body["query"] == "coffee"


def test_search_maps_upstream_failure_to_502(monkeypatch, client):
    def failing(*args, **kwargs):
        raise FoursquareError("HTTP 500")

    monkeypatch.setattr(server, "run_search", failing)

    response = client.get("/api/places/search?query=coffee")

    assert response.status_code == 502
    assert response.get_json()["success"] is False


def test_search_without_api_key_returns_503(monkeypatch):
    monkeypatch.setattr(server, "get_settings", lambda: Settings(foursquare_api_key=""))
    response = server.app.test_client().get("/api/places/search?query=coffee")
    assert response.status_code == 503


def test_nearby_splits_categories(monkeypatch, client):
    captured = {}

    def fake_run_nearby(lat, lng, categories, limit, passed_settings):
        captured.update(categories=categories, limit=limit)
        return ScoredBatch()

    monkeypatch.setattr(server, "run_nearby", fake_run_nearby)

    response = client.get("/api/places/nearby?categories=13032,%2013065,&limit=4")

    assert response.status_code == 200
    assert captured == {"categories": ["13032", "13065"], "limit": 4}
    body = response.get_json()
    assert body["count"] == 0
    assert body["message"] == "No places found"


def test_discover_validates_payload(client):
    assert client.post("/api/discover", json={}).status_code == 400
    assert client.post("/api/discover", json={"interests": []}).status_code == 400
    assert client.post("/api/discover", json={"interests": ["coffee"], "rank_by": "price"}).status_code == 400


def test_discover_builds_context(monkeypatch, client, make_scored):
    captured = {}

    def fake_run_discovery(context, passed_settings):
        captured["context"] = context
        return ScoredBatch(places=[make_scored("a", 70)], skipped=["art: record 0: bad"])

    monkeypatch.setattr(server, "run_discovery", fake_run_discovery)

    response = client.post(
        "/api/discover",
        json={"interests": ["coffee", "books"], "location": {"lat": 40.68, "lng": -73.94}, "limit": 4, "rank_by": "distance"},
    )

    assert response.status_code == 200
    context = captured["context"]
    assert context.interests == ("coffee", "books")
    assert (context.lat, context.lng) == (40.68, -73.94)
    assert context.result_cap == 4
    assert context.rank_by is server.RankingMode.DISTANCE
    body = response.get_json()
    assert body["places"][0]["summary"]
    assert body["warnings"] == ["art: record 0: bad"]


def test_place_details_found(monkeypatch, client):
    monkeypatch.setattr(
        server.foursquare,
        "place_details",
        lambda place_id, api_key, settings: {"fsq_place_id": place_id, "name": "Acme", "chains": []},
    )
    monkeypatch.setattr(
        server.foursquare,
        "place_photos",
        lambda place_id, api_key, settings: [{"id": str(i)} for i in range(5)],
    )

    response = client.get("/api/place/abc")

    assert response.status_code == 200
    place = response.get_json()["place"]
    assert place["id"] == "abc"
    assert place["authenticityScore"] == 70
    assert len(place["photos"]) == 3
    assert "independent place" in place["summary"]


def test_place_details_not_found(monkeypatch, client):
    monkeypatch.setattr(server.foursquare, "place_details", lambda place_id, api_key, settings: None)
    response = client.get("/api/place/missing")
    assert response.status_code == 404


def test_discover_rejects_non_object_body(client):
    response = client.post("/api/discover", json=["coffee"])
    assert response.status_code == 400
    assert response.get_json()["success"] is False
