"""보고서 API 테스트 — 생성, 목록, 집합체 조회, 수정, 순서 보장 삭제.

Report API tests — Create (existing or inline mosque), paginated list,
aggregate load, partial update, inline mosque edits, ordered delete and
an end-to-end inspection flow.
"""

from sqlalchemy import event, select

from httpx import AsyncClient

from app.models.report import IssueItem, IssuePhoto, Report, ReportIssue
from tests.conftest import auth_header, multiple_payload, single_payload

URL = "/api/v1/field/reports"


class TestReportCreate:
    """보고서 생성 테스트."""

    async def test_create_with_existing_mosque(self, client: AsyncClient, tech_token, tech_user, mosque):
        res = await client.post(f"{URL}/", json={
            "mosque_id": str(mosque.id),
            "report_date": "2026-03-02",
        }, headers=auth_header(tech_token))
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "draft"
        assert data["mosque"]["name"] == "Al Noor Mosque"
        assert data["issues"] == []
        assert data["total"] == 0
        assert data["created_by"] == str(tech_user.id)

    async def test_create_with_inline_mosque(self, client: AsyncClient, tech_token):
        res = await client.post(f"{URL}/", json={
            "mosque": {"name": "Al Huda", "city": "Jeddah", "latitude": 21.5, "longitude": 39.2},
            "report_date": "2026-03-02",
            "status": "in_progress",
        }, headers=auth_header(tech_token))
        assert res.status_code == 201
        assert res.json()["mosque"]["city"] == "Jeddah"
        assert res.json()["status"] == "in_progress"

    async def test_create_without_mosque(self, client: AsyncClient, tech_token):
        res = await client.post(f"{URL}/", json={"report_date": "2026-03-02"}, headers=auth_header(tech_token))
        assert res.status_code == 400

    async def test_create_unknown_mosque(self, client: AsyncClient, tech_token):
        res = await client.post(f"{URL}/", json={
            "mosque_id": "00000000-0000-0000-0000-000000000000",
            "report_date": "2026-03-02",
        }, headers=auth_header(tech_token))
        assert res.status_code == 404

    async def test_create_invalid_status(self, client: AsyncClient, tech_token, mosque):
        res = await client.post(f"{URL}/", json={
            "mosque_id": str(mosque.id),
            "report_date": "2026-03-02",
            "status": "archived",
        }, headers=auth_header(tech_token))
        assert res.status_code == 422

    async def test_create_requires_auth(self, client: AsyncClient, mosque):
        res = await client.post(f"{URL}/", json={
            "mosque_id": str(mosque.id), "report_date": "2026-03-02",
        })
        assert res.status_code in (401, 403)


class TestReportList:
    """보고서 목록 테스트."""

    async def test_list_newest_first(self, client: AsyncClient, tech_token, mosque):
        for day in ("2026-01-05", "2026-03-09", "2026-02-01"):
            await client.post(f"{URL}/", json={
                "mosque_id": str(mosque.id), "report_date": day,
            }, headers=auth_header(tech_token))

        res = await client.get(f"{URL}/", headers=auth_header(tech_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 3
        assert [r["report_date"] for r in data["items"]] == ["2026-03-09", "2026-02-01", "2026-01-05"]
        assert data["items"][0]["mosque_name"] == "Al Noor Mosque"

    async def test_list_filter_and_paginate(self, client: AsyncClient, tech_token, mosque):
        for status in ("draft", "completed", "completed"):
            await client.post(f"{URL}/", json={
                "mosque_id": str(mosque.id), "report_date": "2026-03-01", "status": status,
            }, headers=auth_header(tech_token))

        res = await client.get(
            f"{URL}/", params={"status": "completed", "per_page": 1}, headers=auth_header(tech_token),
        )
        data = res.json()
        assert data["total"] == 2
        assert len(data["items"]) == 1
        assert data["per_page"] == 1


class TestReportDetail:
    """보고서 집합체 조회/수정 테스트."""

    async def test_get_aggregate_with_issues(self, client: AsyncClient, tech_token, report, catalog):
        main, subs = catalog["main"], catalog["subs"]
        await client.post(
            f"{URL}/{report.id}/issues",
            json=single_payload(main.id, subs[0].id, quantity=2),
            headers=auth_header(tech_token),
        )
        await client.post(
            f"{URL}/{report.id}/issues",
            json=multiple_payload(main.id, [
                (subs[0].id, 1, 0, "a"), (subs[1].id, 2, 0, "b"), (subs[2].id, 1, 100, "c"),
            ]),
            headers=auth_header(tech_token),
        )

        res = await client.get(f"{URL}/{report.id}", headers=auth_header(tech_token))
        assert res.status_code == 200
        data = res.json()
        assert [i["issue_type"] for i in data["issues"]] == ["single", "multiple"]
        # single: 2 × 50, multiple: 50 + 2 × 30 + 100
        assert data["issues"][0]["total"] == 100
        assert data["issues"][1]["total"] == 210
        assert data["total"] == 310
        assert [p["photo_url"] for p in data["issues"][1]["photos"]] == ["a", "b", "c"]

    async def test_get_not_found(self, client: AsyncClient, tech_token):
        res = await client.get(f"{URL}/00000000-0000-0000-0000-000000000000", headers=auth_header(tech_token))
        assert res.status_code == 404

    async def test_patch_status_only(self, client: AsyncClient, tech_token, report):
        res = await client.patch(f"{URL}/{report.id}", json={"status": "completed"}, headers=auth_header(tech_token))
        assert res.status_code == 200
        assert res.json()["status"] == "completed"
        assert res.json()["report_date"] == "2026-03-01"

    async def test_save_inline_mosque_edit(self, client: AsyncClient, tech_token, report):
        res = await client.put(f"{URL}/{report.id}", json={
            "mosque": {"supervisor_name": "Khalid", "city": "Dammam"},
            "status": "in_progress",
        }, headers=auth_header(tech_token))
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "in_progress"
        assert data["mosque"]["supervisor_name"] == "Khalid"
        assert data["mosque"]["city"] == "Dammam"
        assert data["mosque"]["name"] == "Al Noor Mosque"

    async def test_save_not_found(self, client: AsyncClient, tech_token):
        res = await client.put(
            f"{URL}/00000000-0000-0000-0000-000000000000", json={"status": "draft"},
            headers=auth_header(tech_token),
        )
        assert res.status_code == 404


class TestReportDelete:
    """보고서 삭제 테스트 — 하위 행 순서 보장."""

    async def test_delete_removes_all_descendants_in_order(
        self, client: AsyncClient, db, engine, tech_token, report, catalog
    ):
        main, subs = catalog["main"], catalog["subs"]
        for _ in range(2):
            await client.post(
                f"{URL}/{report.id}/issues",
                json=single_payload(main.id, subs[0].id),
                headers=auth_header(tech_token),
            )

        statements: list[str] = []

        def _capture(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith("DELETE"):
                statements.append(statement.split("WHERE")[0].strip())

        event.listen(engine.sync_engine, "before_cursor_execute", _capture)
        try:
            res = await client.delete(f"{URL}/{report.id}", headers=auth_header(tech_token))
        finally:
            event.remove(engine.sync_engine, "before_cursor_execute", _capture)
        assert res.status_code == 204

        tables = [s.split("FROM")[1].split()[0] for s in statements]
        assert tables == ["issue_items", "issue_photos", "report_issues", "reports"]

        for model in (Report, ReportIssue, IssueItem, IssuePhoto):
            assert (await db.execute(select(model.id))).first() is None

    async def test_delete_not_found(self, client: AsyncClient, tech_token):
        res = await client.delete(f"{URL}/00000000-0000-0000-0000-000000000000", headers=auth_header(tech_token))
        assert res.status_code == 404

    async def test_mosque_with_reports_cannot_be_deleted(self, client: AsyncClient, tech_token, report, mosque):
        res = await client.delete(f"/api/v1/field/mosques/{mosque.id}", headers=auth_header(tech_token))
        assert res.status_code == 400


class TestInspectionFlow:
    """현장 점검 전체 흐름 — 모스크 생성부터 보고서 삭제까지."""

    async def test_end_to_end(self, client: AsyncClient, tech_token, catalog):
        headers = auth_header(tech_token)
        main, subs = catalog["main"], catalog["subs"]

        mosque = await client.post("/api/v1/field/mosques/", json={
            "name": "Al Rahma", "district": "Malaz", "city": "Riyadh",
        }, headers=headers)
        assert mosque.status_code == 201

        created = await client.post(f"{URL}/", json={
            "mosque_id": mosque.json()["id"], "report_date": "2026-04-10",
        }, headers=headers)
        report_id = created.json()["id"]

        issue = await client.post(
            f"{URL}/{report_id}/issues",
            json=single_payload(main.id, subs[1].id, quantity=3),
            headers=headers,
        )
        assert issue.status_code == 201
        assert issue.json()["total"] == 90

        edited = await client.put(
            f"{URL}/{report_id}/issues/{issue.json()['id']}",
            json=single_payload(main.id, subs[2].id, quantity=2, unit_price=20),
            headers=headers,
        )
        assert edited.status_code == 200
        assert edited.json()["total"] == 40

        status = await client.patch(f"{URL}/{report_id}", json={"status": "completed"}, headers=headers)
        assert status.json()["status"] == "completed"
        assert status.json()["total"] == 40

        preview = await client.get(f"{URL}/{report_id}/preview", headers=headers)
        assert preview.status_code == 200
        assert "Al Rahma" in preview.text

        deleted = await client.delete(f"{URL}/{report_id}", headers=headers)
        assert deleted.status_code == 204
        gone = await client.get(f"{URL}/{report_id}", headers=headers)
        assert gone.status_code == 404
