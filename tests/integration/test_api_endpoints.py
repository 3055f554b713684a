"""Integration tests for API endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from timecard_engine.api.routes import health

from tests.conftest import monthly_pay_dates
from tests.integration.conftest import DISTRICT_ID, OTHER_DISTRICT_ID

pytestmark = pytest.mark.asyncio

BASE = f"/api/v1/districts/{DISTRICT_ID}"


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Test /health endpoint."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["running_jobs"] == 0
        assert "timestamp" in data

    async def test_readiness_check(self, client: AsyncClient):
        """Test /ready endpoint."""
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_database_failure_degrades_health(self, client: AsyncClient, monkeypatch):
        async def unreachable(db):
            raise OperationalError("SELECT count(*)", {}, ConnectionRefusedError())

        monkeypatch.setattr(health, "_count_running_jobs", unreachable)

        data = (await client.get("/health")).json()
        assert data["status"] == "degraded"
        assert data["database"] == "unhealthy"
        assert data["running_jobs"] is None

        response = await client.get("/ready")
        assert response.status_code == 503

    async def test_liveness_check(self, client: AsyncClient):
        """Test /live endpoint."""
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestPayCalendarEndpoints:
    """Pay calendar configuration CRUD."""

    async def test_create_and_list(self, client: AsyncClient, districts):
        response = await client.post(
            f"{BASE}/pay-calendars",
            json={
                "name": "2025 monthly",
                "school_year": "2024-2025",
                "pay_dates": monthly_pay_dates(2025),
                "is_active": True,
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["district_id"] == DISTRICT_ID
        assert data["is_active"] is True
        assert len(data["pay_dates"]) == 12
        assert data["pay_dates"][0]["date"] == "2025-01-25"

        response = await client.get(f"{BASE}/pay-calendars")
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [data["id"]]

    async def test_overlapping_pay_dates_rejected(self, client: AsyncClient, districts):
        response = await client.post(
            f"{BASE}/pay-calendars",
            json={
                "name": "Broken",
                "pay_dates": [
                    {"date": "2025-01-25", "period_start": "2025-01-01", "period_end": "2025-01-31"},
                    {"date": "2025-02-25", "period_start": "2025-01-20", "period_end": "2025-02-28"},
                ],
            },
        )
        assert response.status_code == 422
        assert "overlaps" in response.json()["detail"]

    async def test_activating_deactivates_previous(self, client: AsyncClient, districts):
        first = (
            await client.post(
                f"{BASE}/pay-calendars",
                json={"name": "2024", "pay_dates": monthly_pay_dates(2024), "is_active": True},
            )
        ).json()
        second = (
            await client.post(
                f"{BASE}/pay-calendars",
                json={"name": "2025", "pay_dates": monthly_pay_dates(2025)},
            )
        ).json()

        response = await client.patch(
            f"{BASE}/pay-calendars/{second['id']}", json={"is_active": True}
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is True

        response = await client.get(f"{BASE}/pay-calendars/{first['id']}")
        assert response.json()["is_active"] is False

    async def test_other_district_configuration_not_found(self, client: AsyncClient, districts):
        created = (
            await client.post(
                f"{BASE}/pay-calendars",
                json={"name": "2025", "pay_dates": monthly_pay_dates(2025)},
            )
        ).json()

        response = await client.get(
            f"/api/v1/districts/{OTHER_DISTRICT_ID}/pay-calendars/{created['id']}"
        )
        assert response.status_code == 404

    async def test_schedule(self, client: AsyncClient, districts):
        created = (
            await client.post(
                f"{BASE}/pay-calendars",
                json={"name": "2025", "pay_dates": monthly_pay_dates(2025)},
            )
        ).json()

        response = await client.get(
            f"{BASE}/pay-calendars/{created['id']}/schedule", params={"year": 2025}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["config_id"] == created["id"]
        assert len(data["periods"]) == 12
        assert data["periods"][0]["pay_date"] == "2025-01-25"
        assert data["periods"][0]["period_end"] == "2025-01-31"

        response = await client.get(
            f"{BASE}/pay-calendars/{created['id']}/schedule", params={"year": 2024}
        )
        assert response.json()["periods"] == []

    async def test_schedule_unknown_configuration(self, client: AsyncClient, districts):
        response = await client.get(f"{BASE}/pay-calendars/999/schedule", params={"year": 2025})
        assert response.status_code == 404

    async def test_delete(self, client: AsyncClient, districts):
        created = (
            await client.post(f"{BASE}/pay-calendars", json={"name": "Temp", "pay_dates": []})
        ).json()

        response = await client.delete(f"{BASE}/pay-calendars/{created['id']}")
        assert response.status_code == 204

        response = await client.get(f"{BASE}/pay-calendars/{created['id']}")
        assert response.status_code == 404


class TestTemplateEndpoints:
    """Timecard layouts and generation templates."""

    async def _layout(self, client: AsyncClient, district_id: int = DISTRICT_ID) -> int:
        response = await client.post(
            f"/api/v1/districts/{district_id}/timecard-templates",
            json={"name": "Classified", "employee_type": "classified", "fields": [{"name": "hours"}]},
        )
        assert response.status_code == 201
        return response.json()["id"]

    async def test_generation_template_lifecycle(self, client: AsyncClient, districts):
        layout_id = await self._layout(client)

        response = await client.post(
            f"{BASE}/generation-templates",
            json={
                "name": "Classified monthly",
                "employee_type": "classified",
                "timecard_template_id": layout_id,
                "default_field_values": {"department": "Food Services"},
            },
        )
        assert response.status_code == 201
        template = response.json()
        assert template["auto_generation_enabled"] is True
        assert template["default_field_values"] == {"department": "Food Services"}

        response = await client.patch(
            f"{BASE}/generation-templates/{template['id']}",
            json={"auto_generation_enabled": False},
        )
        assert response.status_code == 200
        assert response.json()["auto_generation_enabled"] is False

        response = await client.get(f"{BASE}/generation-templates")
        assert [t["id"] for t in response.json()] == [template["id"]]

        response = await client.delete(f"{BASE}/generation-templates/{template['id']}")
        assert response.status_code == 204

        response = await client.get(f"{BASE}/generation-templates/{template['id']}")
        assert response.status_code == 404

    async def test_layout_from_other_district_rejected(self, client: AsyncClient, districts):
        foreign_layout = await self._layout(client, OTHER_DISTRICT_ID)

        response = await client.post(
            f"{BASE}/generation-templates",
            json={
                "name": "Classified monthly",
                "employee_type": "classified",
                "timecard_template_id": foreign_layout,
            },
        )
        assert response.status_code == 422


class TestGenerationEndpoints:
    """Triggering and inspecting generation runs."""

    async def test_generate(self, client: AsyncClient, seeded_api_district):
        response = await client.post(
            f"{BASE}/timecard-generation/generate",
            json={"month": 3, "year": 2025, "triggered_by": "hr.admin@lincoln.k12.us"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["job_status"] == "completed"
        assert data["employee_count"] == 4
        assert data["timecards_generated"] == 3
        assert data["error_count"] == 1
        assert data["errors"] == ["no template for employee 4 (certificated)"]
        assert data["employee_errors"] == {"4": "no template for employee 4 (certificated)"}
        assert data["processing_log"][0]["action"] == "job_created"

    async def test_generate_twice_is_idempotent(self, client: AsyncClient, seeded_api_district):
        payload = {"month": 3, "year": 2025, "triggered_by": "admin"}
        first = (await client.post(f"{BASE}/timecard-generation/generate", json=payload)).json()
        second = (await client.post(f"{BASE}/timecard-generation/generate", json=payload)).json()

        assert first["timecards_generated"] == 3
        assert second["timecards_generated"] == 0
        assert second["skipped_count"] == 3

        response = await client.get(
            f"{BASE}/timecard-generation/preview", params={"month": 3, "year": 2025}
        )
        assert response.json()["count"] == 3

    async def test_invalid_month_rejected(self, client: AsyncClient, seeded_api_district):
        response = await client.post(
            f"{BASE}/timecard-generation/generate",
            json={"month": 13, "year": 2025, "triggered_by": "admin"},
        )
        assert response.status_code == 422

    async def test_fatal_run_reported_in_body(self, client: AsyncClient, districts):
        response = await client.post(
            f"{BASE}/timecard-generation/generate",
            json={"month": 3, "year": 2025, "triggered_by": "admin"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["job_status"] == "failed"
        assert data["errors"] == [f"No active pay calendar configuration for district {DISTRICT_ID}"]

    async def test_actor_header_recorded(self, client: AsyncClient, seeded_api_district):
        await client.post(
            f"{BASE}/timecard-generation/generate",
            json={"month": 3, "year": 2025, "triggered_by": "scheduler"},
            headers={"X-Actor": "jane.doe"},
        )

        response = await client.get(f"{BASE}/timecard-generation/jobs")
        assert response.json()["items"][0]["triggered_by"] == "jane.doe"

    async def test_bulk(self, client: AsyncClient, seeded_api_district):
        response = await client.post(
            f"{BASE}/timecard-generation/bulk",
            json={
                "start_month": 11,
                "start_year": 2024,
                "end_month": 2,
                "end_year": 2025,
                "triggered_by": "admin",
                "employee_types": ["classified"],
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert [(r["month"], r["year"]) for r in data["results"]] == [
            (11, 2024),
            (12, 2024),
            (1, 2025),
            (2, 2025),
        ]
        assert data["total_generated"] == 12
        assert data["total_errors"] == 0

    async def test_bulk_reversed_range_rejected(self, client: AsyncClient, seeded_api_district):
        response = await client.post(
            f"{BASE}/timecard-generation/bulk",
            json={
                "start_month": 3,
                "start_year": 2025,
                "end_month": 1,
                "end_year": 2025,
                "triggered_by": "admin",
            },
        )
        assert response.status_code == 422

    async def test_preview(self, client: AsyncClient, seeded_api_district):
        response = await client.get(
            f"{BASE}/timecard-generation/preview", params={"month": 3, "year": 2025}
        )
        assert response.status_code == 200
        assert response.json() == {
            "exists": False,
            "count": 0,
            "employee_types": ["certificated", "classified"],
        }

    async def test_jobs_newest_first(self, client: AsyncClient, seeded_api_district, clock):
        for month in (1, 2):
            await client.post(
                f"{BASE}/timecard-generation/generate",
                json={"month": month, "year": 2025, "triggered_by": "admin"},
            )
            clock.advance(60)

        response = await client.get(f"{BASE}/timecard-generation/jobs")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [j["target_month"] for j in data["items"]] == [2, 1]
        assert data["items"][0]["status"] == "completed"
        assert data["items"][0]["job_type"] == "monthly_timecards"

        response = await client.get(f"{BASE}/timecard-generation/jobs", params={"limit": 1})
        assert response.json()["total"] == 1
