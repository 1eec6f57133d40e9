"""
HTTP tests for the listings API.

Runs the real app against a file-backed SQLite datastore, plus the
scenarios where DATABASE_URL is missing at request time.
"""

import pytest
from fastapi.testclient import TestClient

from estate.config import get_settings


def create_listing(client, payload, **overrides):
    response = client.post("/listings", json={**payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


class TestWithoutDatabaseUrl:
    """The app starts and serves static routes; data routes fail per request."""

    def test_root_served_without_datastore(self, unconfigured_client):
        response = unconfigured_client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Estate Listings"

    def test_data_route_reports_missing_setting(self, unconfigured_client):
        response = unconfigured_client.get("/listings")

        assert response.status_code == 503
        body = response.json()
        assert body["missing_setting"] == "DATABASE_URL"
        assert body["error_type"] == "MissingConfigurationException"
        assert response.headers["cache-control"] == "no-store, max-age=0"

    def test_health_does_not_connect(self, unconfigured_client):
        response = unconfigured_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["checks"]["database"] == "not_connected"

    def test_deep_health_reports_degraded(self, unconfigured_client):
        response = unconfigured_client.get("/health", params={"deep": "true"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert "DATABASE_URL" in body["checks"]["database"]


class TestInvalidConfiguration:
    """A malformed setting fails data requests with 503, like a missing one."""

    @pytest.fixture
    def misconfigured_client(self, configured_env, monkeypatch):
        monkeypatch.setenv("DB_POOL_SIZE", "five")
        get_settings.cache_clear()
        from estate.main import app

        with TestClient(app) as test_client:
            yield test_client

    def test_data_route_names_invalid_setting(self, misconfigured_client):
        response = misconfigured_client.get("/listings")

        assert response.status_code == 503
        body = response.json()
        assert body["error_type"] == "InvalidConfigurationException"
        assert body["invalid_settings"] == ["DB_POOL_SIZE"]
        assert response.headers["cache-control"] == "no-store, max-age=0"

    def test_deep_health_reports_degraded(self, misconfigured_client):
        response = misconfigured_client.get("/health", params={"deep": "true"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert "DB_POOL_SIZE" in body["checks"]["database"]


class TestListingsCrud:

    def test_create_and_fetch(self, client, listing_payload):
        created = create_listing(client, listing_payload)

        by_id = client.get(f"/listings/{created['id']}")
        by_slug = client.get(f"/listings/slug/{created['slug']}")

        assert by_id.status_code == 200
        assert by_id.json()["title"] == listing_payload["title"]
        assert by_id.json()["currency"] == "EUR"
        assert by_id.json()["amenities"] == ["balcony", "elevator"]
        assert by_slug.json()["id"] == created["id"]

    def test_data_responses_are_dynamic(self, client, listing_payload):
        created = create_listing(client, listing_payload)

        response = client.get(f"/listings/{created['id']}")

        assert response.headers["cache-control"] == "no-store, max-age=0"
        assert response.headers["x-execution-mode"] == "force-dynamic"
        assert "x-correlation-id" in response.headers

    def test_unknown_listing_is_404(self, client):
        response = client.get("/listings/does-not-exist")

        assert response.status_code == 404
        assert response.headers["cache-control"] == "no-store, max-age=0"

    def test_invalid_payload_is_422(self, client, listing_payload):
        response = client.post("/listings", json={**listing_payload, "property_type": "castle"})

        assert response.status_code == 422
        assert response.headers["cache-control"] == "no-store, max-age=0"

    def test_patch_and_status_rules(self, client, listing_payload):
        created = create_listing(client, listing_payload)

        patched = client.patch(f"/listings/{created['id']}", json={"price": 470000, "status": "sold"})
        reopened = client.patch(f"/listings/{created['id']}", json={"status": "active"})

        assert patched.status_code == 200
        assert patched.json()["price"] == 470000
        assert patched.json()["status"] == "sold"
        assert reopened.status_code == 422

    def test_delete(self, client, listing_payload):
        created = create_listing(client, listing_payload)
        client.post(
            f"/listings/{created['id']}/inquiries",
            json={"name": "Ana", "email": "ana@example.com", "message": "Viewing?"}
        )

        deleted = client.delete(f"/listings/{created['id']}")
        again = client.delete(f"/listings/{created['id']}")

        assert deleted.status_code == 204
        assert again.status_code == 404
        assert client.get(f"/listings/{created['id']}").status_code == 404


class TestSearch:

    @pytest.fixture
    def seeded(self, client, listing_payload):
        create_listing(client, listing_payload, title="Cheap flat", price=150000, city="Lisbon", bedrooms=1)
        create_listing(client, listing_payload, title="Family house", price=650000, city="Porto",
                       property_type="house", bedrooms=4)
        create_listing(client, listing_payload, title="Riverside condo", price=390000, city="lisbon",
                       property_type="condo", bedrooms=2)
        return client

    def test_city_filter_is_case_insensitive(self, seeded):
        body = seeded.get("/listings", params={"city": "LISBON"}).json()

        assert body["total_count"] == 2
        assert {item["title"] for item in body["listings"]} == {"Cheap flat", "Riverside condo"}

    def test_price_range_and_sort(self, seeded):
        body = seeded.get("/listings", params={"min_price": 200000, "sort": "price_asc"}).json()

        assert [item["price"] for item in body["listings"]] == [390000, 650000]

    def test_bedrooms_and_type(self, seeded):
        body = seeded.get("/listings", params={"min_bedrooms": 2, "property_type": "house"}).json()

        assert body["total_count"] == 1
        assert body["listings"][0]["title"] == "Family house"

    def test_pagination(self, seeded):
        body = seeded.get("/listings", params={"limit": 2, "offset": 2}).json()

        assert body["total_count"] == 3
        assert len(body["listings"]) == 1
        assert body["limit"] == 2

    def test_inverted_price_range_is_422(self, seeded):
        response = seeded.get("/listings", params={"min_price": 500000, "max_price": 100})

        assert response.status_code == 422


class TestMetadataAndInquiries:

    def test_metadata_uses_site_url_fallback(self, client, listing_payload):
        created = create_listing(client, listing_payload)

        body = client.get(f"/listings/{created['id']}/metadata").json()

        assert body["canonical_url"] == f"https://example.com/listings/{created['slug']}"
        assert body["open_graph"]["images"] == ["https://example.com/images/alfama-1.jpg"]

    def test_metadata_uses_configured_site_url(self, client, listing_payload, monkeypatch):
        monkeypatch.setenv("PUBLIC_SITE_URL", "https://homes.example.org")
        created = create_listing(client, listing_payload)

        body = client.get(f"/listings/{created['id']}/metadata").json()

        assert body["metadata_base"] == "https://homes.example.org"

    def test_inquiry_round_trip(self, client, listing_payload):
        created = create_listing(client, listing_payload)

        posted = client.post(
            f"/listings/{created['id']}/inquiries",
            json={"name": "Ana", "email": "ana@example.com", "phone": "+351 900 000 000",
                  "message": "Can I visit on Saturday?"}
        )
        listed = client.get(f"/listings/{created['id']}/inquiries")

        assert posted.status_code == 201
        assert [item["id"] for item in listed.json()] == [posted.json()["id"]]

    def test_inquiry_on_sold_listing_rejected(self, client, listing_payload):
        created = create_listing(client, listing_payload, status="sold")

        response = client.post(
            f"/listings/{created['id']}/inquiries",
            json={"name": "Ana", "email": "ana@example.com", "message": "Still for sale?"}
        )

        assert response.status_code == 422

    def test_inquiry_email_validated(self, client, listing_payload):
        created = create_listing(client, listing_payload)

        response = client.post(
            f"/listings/{created['id']}/inquiries",
            json={"name": "Ana", "email": "not-an-email", "message": "Hi"}
        )

        assert response.status_code == 422

    def test_health_after_first_request(self, client, listing_payload):
        create_listing(client, listing_payload)

        body = client.get("/health").json()

        assert body["checks"]["database"] == "connected"
        assert body["environment"] == "test"
