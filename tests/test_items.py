"""점검 항목 카탈로그 API 테스트.

Catalog API tests — Main item / sub item CRUD, admin-only access,
reference protection and the default catalog seed.
"""

from httpx import AsyncClient

from app.services.catalog_service import DEFAULT_CATALOG
from tests.conftest import auth_header, single_payload

ADMIN = "/api/v1/admin"
FIELD_ITEMS = "/api/v1/field/items/"


class TestMainItems:
    """주 항목 테스트."""

    async def test_create_main_item(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN}/main-items", json={
            "name": "Electricity",
            "name_ar": "الكهرباء",
        }, headers=auth_header(admin_token))
        assert res.status_code == 201
        data = res.json()
        assert data["name"] == "Electricity"
        assert data["name_ar"] == "الكهرباء"
        assert data["sub_items"] == []

    async def test_create_main_item_technician_forbidden(self, client: AsyncClient, tech_token):
        res = await client.post(f"{ADMIN}/main-items", json={
            "name": "X", "name_ar": "س",
        }, headers=auth_header(tech_token))
        assert res.status_code == 403

    async def test_create_main_item_empty_name(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN}/main-items", json={
            "name": "", "name_ar": "س",
        }, headers=auth_header(admin_token))
        assert res.status_code == 422

    async def test_list_with_sub_items(self, client: AsyncClient, admin_token, catalog):
        res = await client.get(f"{ADMIN}/main-items", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert len(data) == 1
        assert [s["name"] for s in data[0]["sub_items"]] == [
            "Clean toilet", "Repair faucet", "Replace lamp",
        ]

    async def test_update_main_item(self, client: AsyncClient, admin_token, catalog):
        main_id = catalog["main"].id
        res = await client.put(f"{ADMIN}/main-items/{main_id}", json={
            "name": "Restrooms",
        }, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["name"] == "Restrooms"
        assert res.json()["name_ar"] == "دورات المياه"
        assert len(res.json()["sub_items"]) == 3

    async def test_get_main_item_not_found(self, client: AsyncClient, admin_token):
        res = await client.get(
            f"{ADMIN}/main-items/00000000-0000-0000-0000-000000000000",
            headers=auth_header(admin_token),
        )
        assert res.status_code == 404

    async def test_delete_main_item_removes_sub_items(self, client: AsyncClient, admin_token, catalog):
        main_id = catalog["main"].id
        res = await client.delete(f"{ADMIN}/main-items/{main_id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        subs = await client.get(f"{ADMIN}/sub-items", headers=auth_header(admin_token))
        assert subs.json() == []

    async def test_delete_referenced_main_item(
        self, client: AsyncClient, admin_token, tech_token, catalog, report
    ):
        """이슈가 참조하는 주 항목은 삭제 불가."""
        payload = single_payload(catalog["main"].id, catalog["subs"][0].id)
        created = await client.post(
            f"/api/v1/field/reports/{report.id}/issues", json=payload, headers=auth_header(tech_token),
        )
        assert created.status_code == 201

        res = await client.delete(
            f"{ADMIN}/main-items/{catalog['main'].id}", headers=auth_header(admin_token),
        )
        assert res.status_code == 400


class TestSubItems:
    """세부 항목 테스트."""

    async def test_create_sub_item(self, client: AsyncClient, admin_token, catalog):
        res = await client.post(f"{ADMIN}/sub-items", json={
            "main_item_id": str(catalog["main"].id),
            "name": "Fix door",
            "name_ar": "إصلاح باب",
            "unit": "piece",
            "unit_ar": "قطعة",
            "unit_price": 75,
        }, headers=auth_header(admin_token))
        assert res.status_code == 201
        data = res.json()
        assert data["unit_price"] == 75
        assert data["main_item_id"] == str(catalog["main"].id)

    async def test_create_sub_item_negative_price(self, client: AsyncClient, admin_token, catalog):
        res = await client.post(f"{ADMIN}/sub-items", json={
            "main_item_id": str(catalog["main"].id),
            "name": "Bad", "name_ar": "سيء", "unit_price": -1,
        }, headers=auth_header(admin_token))
        assert res.status_code == 422

    async def test_create_sub_item_invalid_parent(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN}/sub-items", json={
            "main_item_id": "not-a-uuid", "name": "X", "name_ar": "س",
        }, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_create_sub_item_unknown_parent(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN}/sub-items", json={
            "main_item_id": "00000000-0000-0000-0000-000000000000", "name": "X", "name_ar": "س",
        }, headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_filter_by_main_item(self, client: AsyncClient, admin_token, catalog):
        res = await client.get(
            f"{ADMIN}/sub-items", params={"main_item_id": str(catalog["main"].id)},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert len(res.json()) == 3

    async def test_update_sub_item_price(self, client: AsyncClient, admin_token, catalog):
        sub_id = catalog["subs"][0].id
        res = await client.put(f"{ADMIN}/sub-items/{sub_id}", json={
            "unit_price": 55, "name_table": "Toilet cleaning",
        }, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["unit_price"] == 55
        assert res.json()["name_table"] == "Toilet cleaning"
        assert res.json()["name"] == "Clean toilet"

    async def test_delete_sub_item(self, client: AsyncClient, admin_token, catalog):
        sub_id = catalog["subs"][2].id
        res = await client.delete(f"{ADMIN}/sub-items/{sub_id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        again = await client.delete(f"{ADMIN}/sub-items/{sub_id}", headers=auth_header(admin_token))
        assert again.status_code == 404


class TestCatalogSeed:
    """기본 카탈로그 시드 테스트."""

    async def test_seed_replaces_catalog(self, client: AsyncClient, admin_token, catalog):
        res = await client.post(f"{ADMIN}/catalog/seed", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert [m["name"] for m in data] == [name for name, _, _ in DEFAULT_CATALOG]
        assert sum(len(m["sub_items"]) for m in data) == 7
        assert "Toilets" not in [m["name"] for m in data]

    async def test_seed_blocked_when_referenced(
        self, client: AsyncClient, admin_token, tech_token, catalog, report
    ):
        payload = single_payload(catalog["main"].id, catalog["subs"][0].id)
        await client.post(
            f"/api/v1/field/reports/{report.id}/issues", json=payload, headers=auth_header(tech_token),
        )
        res = await client.post(f"{ADMIN}/catalog/seed", headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_seed_technician_forbidden(self, client: AsyncClient, tech_token):
        res = await client.post(f"{ADMIN}/catalog/seed", headers=auth_header(tech_token))
        assert res.status_code == 403


class TestFieldCatalog:
    """현장용 카탈로그 조회 — 모든 인증 사용자."""

    async def test_technician_reads_catalog(self, client: AsyncClient, tech_token, catalog):
        res = await client.get(FIELD_ITEMS, headers=auth_header(tech_token))
        assert res.status_code == 200
        assert res.json()[0]["sub_items"][0]["unit_price"] == 50
