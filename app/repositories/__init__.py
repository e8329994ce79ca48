"""레포지토리 패키지 — 점검 데이터 쿼리 계층.

Repository package — Query layer for users/tokens, mosques, the item
catalog, reports and report issues. Domain repositories extend
BaseRepository and only flush; commits belong to the caller.
"""
