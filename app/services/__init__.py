"""서비스 패키지 — 점검 보고서 비즈니스 로직 계층.

Service package — Catalog, mosque, report and issue rules; photo
compression and upload; map snapshots; the in-progress issue editor;
the report workspace; HTML templating and PDF export.
"""
