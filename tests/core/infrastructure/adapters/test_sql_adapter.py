import pytest
from sqlalchemy import inspect, select

from core.infrastructure.adapters.sql_adapter import SQLAdapter
from core.infrastructure.sql.tables import ProfileImageRow
from core.utils.constants import ENV_IMAGE_DATABASE_URL


class TestSQLAdapter:
    def test_init_missing_database_url(self, monkeypatch):
        monkeypatch.delenv(ENV_IMAGE_DATABASE_URL, raising=False)

        with pytest.raises(RuntimeError):
            SQLAdapter()

    def test_init_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_IMAGE_DATABASE_URL, f"sqlite:///{tmp_path / 'env.db'}")

        adapter = SQLAdapter()

        assert adapter.engine.url.database.endswith("env.db")
        adapter.dispose()

    def test_create_tables(self, sql_adapter):
        tables = set(inspect(sql_adapter.engine).get_table_names())

        assert {"profile", "listing"} <= tables

    def test_listing_primary_key_is_listing_and_index(self, sql_adapter):
        pk = inspect(sql_adapter.engine).get_pk_constraint("listing")

        assert set(pk["constrained_columns"]) == {"listing_id", "image_index"}

    def test_session_commits_on_success(self, sql_adapter):
        with sql_adapter.session() as session:
            session.add(ProfileImageRow(user_id=1, storage_key="k", created_at="t"))

        with sql_adapter.session() as session:
            assert session.execute(select(ProfileImageRow.user_id)).scalar_one() == 1

    def test_session_rolls_back_on_error(self, sql_adapter):
        with pytest.raises(RuntimeError):
            with sql_adapter.session() as session:
                session.add(ProfileImageRow(user_id=2, storage_key="k", created_at="t"))
                session.flush()
                raise RuntimeError("boom")

        with sql_adapter.session() as session:
            assert session.execute(select(ProfileImageRow)).first() is None
