"""
Tests for the startup bootstrap (default folder creation).
"""

import pytest

from foldernotes.config import Settings
from foldernotes.main import initialize_store
from foldernotes.services.bootstrap import ensure_default_folder
from foldernotes.services.folder_service import folder_service

from conftest import sqlite_url


class TestEnsureDefaultFolder:

    @pytest.mark.asyncio
    async def test_creates_folder_on_empty_store(self, db_session):
        created = await ensure_default_folder(db_session, "My Notes")

        assert created is not None
        assert created.name == "My Notes"
        folders = await folder_service.list_folders(db_session)
        assert [f.name for f in folders] == ["My Notes"]

    @pytest.mark.asyncio
    async def test_skips_when_folders_exist(self, db_session, make_folder):
        await make_folder("Existing")

        assert await ensure_default_folder(db_session, "My Notes") is None
        folders = await folder_service.list_folders(db_session)
        assert [f.name for f in folders] == ["Existing"]

    @pytest.mark.asyncio
    async def test_second_run_creates_nothing(self, db_session):
        await ensure_default_folder(db_session, "My Notes")
        await ensure_default_folder(db_session, "My Notes")

        assert await folder_service.count_folders(db_session) == 1


class TestInitializeStore:

    @pytest.mark.asyncio
    async def test_creates_schema_and_default_folder(self, tmp_path):
        from foldernotes.database import Database

        app_settings = Settings(
            database_url=sqlite_url(tmp_path / "boot.db"),
            default_folder_name="Inbox",
        )
        database = Database.from_settings(app_settings)
        try:
            await initialize_store(database, app_settings)
            await initialize_store(database, app_settings)

            async with database.session() as session:
                folders = await folder_service.list_folders(session)
            assert [f.name for f in folders] == ["Inbox"]
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_unreachable_store_does_not_raise(self, tmp_path):
        from foldernotes.database import Database

        app_settings = Settings(
            database_url=sqlite_url(tmp_path / "missing-dir" / "boot.db"),
        )
        database = Database.from_settings(app_settings)
        try:
            await initialize_store(database, app_settings)
        finally:
            await database.dispose()
