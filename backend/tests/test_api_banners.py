"""Tests for banners API endpoints."""

import pytest
from datetime import datetime, timedelta


def _iso(**delta) -> str:
    return (datetime.utcnow() + timedelta(**delta)).isoformat()


@pytest.mark.unit
class TestListBanners:
    """Test banner listing, display state and filters."""

    def test_requires_authentication(self, client):
        response = client.get("/api/banners/")
        assert response.status_code == 401

    def test_list_in_display_order(self, authenticated_client, banners):
        response = authenticated_client.get("/api/banners/")

        assert response.status_code == 200
        data = response.json()
        assert [b["title"] for b in data["banners"]] == [
            "Hero",
            "Summer Sale",
            "Coming Soon",
            "Old Promo",
            "Hidden",
        ]
        assert data["pagination"]["total"] == 5

    def test_derived_status(self, authenticated_client, banners):
        response = authenticated_client.get("/api/banners/")

        statuses = {b["title"]: b["status"] for b in response.json()["banners"]}
        assert statuses == {
            "Hero": "active",
            "Summer Sale": "active",
            "Coming Soon": "scheduled",
            "Old Promo": "expired",
            "Hidden": "inactive",
        }

    @pytest.mark.parametrize(
        "status,titles",
        [
            ("active", ["Hero", "Summer Sale"]),
            ("scheduled", ["Coming Soon"]),
            ("expired", ["Old Promo"]),
            ("inactive", ["Hidden"]),
        ],
    )
    def test_status_filter(self, authenticated_client, banners, status, titles):
        response = authenticated_client.get("/api/banners/", params={"status": status})

        assert [b["title"] for b in response.json()["banners"]] == titles

    def test_invalid_status_filter(self, authenticated_client):
        response = authenticated_client.get("/api/banners/", params={"status": "live"})
        assert response.status_code == 400

    def test_search_overlay_text(self, authenticated_client, banners):
        response = authenticated_client.get("/api/banners/", params={"search": "off"})

        assert [b["title"] for b in response.json()["banners"]] == ["Summer Sale"]

    def test_pagination(self, authenticated_client, banners):
        response = authenticated_client.get(
            "/api/banners/", params={"page": 2, "limit": 2}
        )

        data = response.json()
        assert [b["title"] for b in data["banners"]] == ["Coming Soon", "Old Promo"]
        assert data["pagination"]["pages"] == 3


@pytest.mark.unit
class TestActiveBanners:
    """Test the storefront banner feed."""

    def test_public_without_token(self, client, banners):
        response = client.get("/api/banners/active")

        assert response.status_code == 200
        assert [b["title"] for b in response.json()["banners"]] == [
            "Hero",
            "Summer Sale",
        ]

    def test_empty(self, client):
        response = client.get("/api/banners/active")
        assert response.json() == {"banners": []}


@pytest.mark.unit
class TestBannerMutations:
    """Test creating, updating, toggling, reordering and deleting banners."""

    def test_create_banner(self, authenticated_client):
        response = authenticated_client.post(
            "/api/banners/",
            json={"title": "Launch", "image_url": "/img/launch.jpg"},
        )

        assert response.status_code == 201
        banner = response.json()["banner"]
        assert banner["status"] == "active"
        assert banner["text_position"] == "center"
        assert banner["text_color"] == "#ffffff"
        assert banner["overlay_opacity"] == 0.5

    def test_create_scheduled_banner(self, authenticated_client):
        response = authenticated_client.post(
            "/api/banners/",
            json={
                "title": "Black Friday",
                "image_url": "/img/bf.jpg",
                "start_date": _iso(days=5),
                "end_date": _iso(days=8),
            },
        )

        assert response.status_code == 201
        assert response.json()["banner"]["status"] == "scheduled"

    def test_create_requires_image(self, authenticated_client):
        response = authenticated_client.post("/api/banners/", json={"title": "No image"})
        assert response.status_code == 422

    def test_create_rejects_inverted_schedule(self, authenticated_client):
        response = authenticated_client.post(
            "/api/banners/",
            json={
                "title": "Backwards",
                "image_url": "/img/x.jpg",
                "start_date": _iso(days=5),
                "end_date": _iso(days=1),
            },
        )
        assert response.status_code == 422

    def test_viewer_cannot_create(self, viewer_client):
        response = viewer_client.post(
            "/api/banners/", json={"title": "Nope", "image_url": "/img/x.jpg"}
        )
        assert response.status_code == 403

    def test_update_banner(self, authenticated_client, banners):
        banner_id = banners["sale"].id

        response = authenticated_client.put(
            f"/api/banners/{banner_id}", json={"title": "Winter Sale"}
        )

        assert response.status_code == 200
        banner = response.json()["banner"]
        assert banner["title"] == "Winter Sale"
        assert banner["text_overlay"] == "Up to 50% off"

    def test_update_rejects_end_before_existing_start(self, authenticated_client, banners):
        response = authenticated_client.put(
            f"/api/banners/{banners['hero'].id}", json={"end_date": _iso(days=-3)}
        )

        assert response.status_code == 400

    def test_update_missing(self, authenticated_client):
        response = authenticated_client.put("/api/banners/999", json={"title": "X"})
        assert response.status_code == 404

    def test_toggle(self, authenticated_client, banners):
        banner_id = banners["hidden"].id

        response = authenticated_client.put(f"/api/banners/{banner_id}/toggle")

        assert response.status_code == 200
        assert response.json()["banner"]["is_active"] is True
        assert response.json()["banner"]["status"] == "active"

        response = authenticated_client.put(f"/api/banners/{banner_id}/toggle")
        assert response.json()["banner"]["status"] == "inactive"

    def test_reorder(self, authenticated_client, banners):
        response = authenticated_client.put(
            "/api/banners/reorder",
            json={"banners": [{"id": banners["hidden"].id, "display_order": -1}]},
        )

        assert response.status_code == 200
        listing = authenticated_client.get("/api/banners/").json()
        assert listing["banners"][0]["title"] == "Hidden"

    def test_reorder_requires_items(self, authenticated_client):
        response = authenticated_client.put("/api/banners/reorder", json={"banners": []})
        assert response.status_code == 400

    def test_reorder_unknown_banner(self, authenticated_client, banners):
        response = authenticated_client.put(
            "/api/banners/reorder",
            json={
                "banners": [
                    {"id": banners["hero"].id, "display_order": 9},
                    {"id": 999, "display_order": 0},
                ]
            },
        )

        assert response.status_code == 404
        # Nothing applied
        hero = authenticated_client.get(f"/api/banners/{banners['hero'].id}").json()
        assert hero["banner"]["display_order"] == 0

    def test_delete(self, authenticated_client, banners):
        banner_id = banners["expired"].id

        response = authenticated_client.delete(f"/api/banners/{banner_id}")

        assert response.status_code == 200
        assert authenticated_client.get(f"/api/banners/{banner_id}").status_code == 404

    def test_delete_missing(self, authenticated_client):
        response = authenticated_client.delete("/api/banners/999")
        assert response.status_code == 404
