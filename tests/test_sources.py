"""
Tests for api/sources.py — record source variants and source selection.
"""
import json
from datetime import datetime, timezone

import pytest

from api.database import ConnectionPool, connect_writable, create_schema
from api.errors import RecordValidationError, StoreQueryError, StoreUnavailableError
from api.models import Advocate
from api.sources import (
    FixtureAdvocateSource,
    SqliteAdvocateSource,
    UnavailableAdvocateSource,
    build_fixture_records,
    select_source,
    validate_records,
)
from conftest import SMALL_DATA, make_advocate
from utils.advocate_data import ADVOCATE_DATA


class TestBuildFixtureRecords:
    def test_ids_and_timestamps(self):
        base = datetime(2024, 6, 1, tzinfo=timezone.utc)
        records = build_fixture_records(SMALL_DATA, base_time=base)
        assert [r["id"] for r in records] == [1, 2, 3]
        assert records[0]["created_at"] == base
        assert records[0]["created_at"] < records[1]["created_at"] < records[2]["created_at"]

    def test_does_not_mutate_input(self):
        data = [make_advocate("Solo", specialties=["A"])]
        records = build_fixture_records(data)
        records[0]["specialties"].append("B")
        assert data[0]["specialties"] == ["A"]
        assert "id" not in data[0]

    def test_default_dataset_validates(self):
        advocates = validate_records(build_fixture_records())
        assert len(advocates) == len(ADVOCATE_DATA)


class TestValidateRecords:
    def test_returns_models(self):
        advocates = validate_records(build_fixture_records(SMALL_DATA))
        assert all(isinstance(a, Advocate) for a in advocates)

    def test_first_bad_record_raises(self):
        records = build_fixture_records([make_advocate("Ok"), make_advocate("")])
        with pytest.raises(RecordValidationError) as exc_info:
            validate_records(records)
        assert exc_info.value.context["record_id"] == 2
        assert exc_info.value.status_code == 500


class TestFixtureSource:
    def test_newest_first(self, small_fixture_source):
        page = small_fixture_source.fetch_page("", limit=10, offset=0)
        assert [a.first_name for a in page.advocates] == ["Carla", "Bob", "Jane"]
        assert page.total == 3

    def test_offset_and_limit(self, large_fixture_source):
        page = large_fixture_source.fetch_page("", limit=20, offset=40)
        assert len(page.advocates) == 5
        assert page.total == 45

    def test_search(self, small_fixture_source):
        page = small_fixture_source.fetch_page("cardio", limit=10, offset=0)
        assert [a.first_name for a in page.advocates] == ["Bob"]

    def test_count(self, small_fixture_source):
        assert small_fixture_source.count() == 3


class TestSqliteSource:
    def test_newest_first(self, small_store):
        page = small_store.fetch_page("", limit=10, offset=0)
        assert [a.first_name for a in page.advocates] == ["Carla", "Bob", "Jane"]

    def test_specialties_decoded(self, small_store):
        page = small_store.fetch_page("onco", limit=10, offset=0)
        assert page.advocates[0].specialties == ["Oncology", "Chronic pain"]

    def test_created_at_is_aware_datetime(self, small_store):
        advocate = small_store.fetch_page("", limit=1, offset=0).advocates[0]
        assert advocate.created_at.tzinfo is not None

    def test_total_past_last_page(self, large_store):
        page = large_store.fetch_page("", limit=20, offset=100)
        assert page.advocates == []
        assert page.total == 45

    def test_empty_table(self, tmp_path):
        db_path = tmp_path / "empty.sqlite"
        conn = connect_writable(db_path)
        create_schema(conn)
        conn.close()
        source = SqliteAdvocateSource(ConnectionPool(db_path))
        page = source.fetch_page("", limit=20, offset=0)
        assert page.advocates == [] and page.total == 0
        source.close()

    def test_count(self, large_store):
        assert large_store.count() == 45

    def test_missing_table_raises_store_error(self, tmp_path):
        db_path = tmp_path / "no_table.sqlite"
        connect_writable(db_path).close()
        source = SqliteAdvocateSource(ConnectionPool(db_path))
        with pytest.raises(StoreQueryError):
            source.fetch_page("", limit=20, offset=0)
        with pytest.raises(StoreQueryError):
            source.count()
        source.close()

    def test_bad_specialties_json(self, small_db):
        conn = connect_writable(small_db)
        with conn:
            conn.execute("UPDATE advocates SET specialties = 'not json' WHERE first_name = 'Bob'")
        conn.close()
        source = SqliteAdvocateSource(ConnectionPool(small_db))
        with pytest.raises(RecordValidationError):
            source.fetch_page("", limit=20, offset=0)
        source.close()

    def test_schema_drift_fails_page(self, small_db):
        conn = connect_writable(small_db)
        with conn:
            conn.execute("UPDATE advocates SET city = '' WHERE first_name = 'Jane'")
        conn.close()
        source = SqliteAdvocateSource(ConnectionPool(small_db))
        with pytest.raises(RecordValidationError):
            source.fetch_page("", limit=20, offset=0)
        # Jane is not on the newest-first page of one
        assert len(source.fetch_page("", limit=1, offset=0).advocates) == 1
        source.close()

    def test_specialties_stored_as_json(self, small_db):
        conn = connect_writable(small_db)
        raw = conn.execute(
            "SELECT specialties FROM advocates WHERE first_name = 'Bob'"
        ).fetchone()[0]
        conn.close()
        assert json.loads(raw) == ["Cardiology"]


class TestUnavailableSource:
    def test_fetch_raises(self):
        with pytest.raises(StoreUnavailableError):
            UnavailableAdvocateSource().fetch_page("", limit=20, offset=0)

    def test_count_raises(self):
        with pytest.raises(StoreUnavailableError):
            UnavailableAdvocateSource().count()


class TestSelectSource:
    def test_store_configured(self, make_config, tmp_path):
        source = select_source(make_config(APP_DB_PATH=str(tmp_path / "a.sqlite")))
        assert isinstance(source, SqliteAdvocateSource)
        assert source.pool.db_path == tmp_path / "a.sqlite"
        assert source.pool.max_size == 20

    def test_pool_size_from_config(self, make_config, tmp_path):
        source = select_source(make_config(
            APP_DB_PATH=str(tmp_path / "a.sqlite"), APP_DB_POOL_SIZE="5",
        ))
        assert source.pool.max_size == 5

    def test_fixture_fallback_is_default(self, make_config):
        assert isinstance(select_source(make_config()), FixtureAdvocateSource)

    def test_error_fallback(self, make_config):
        source = select_source(make_config(APP_STORE_FALLBACK="error"))
        assert isinstance(source, UnavailableAdvocateSource)

    def test_store_wins_over_fallback_policy(self, make_config, tmp_path):
        source = select_source(make_config(
            APP_DB_PATH=str(tmp_path / "a.sqlite"), APP_STORE_FALLBACK="error",
        ))
        assert isinstance(source, SqliteAdvocateSource)

    def test_unknown_policy_rejected(self, make_config):
        with pytest.raises(ValueError):
            select_source(make_config(APP_STORE_FALLBACK="maybe"))
