"""
FolderNotes Backend — Note Service Unit Tests
==============================================

What:  Tests for NoteService business logic against a real SQLite store.
How:   Each test gets an empty database from the `database` fixture.

What we test:
    ✅ Create applies default title/content and starts with no files
    ✅ Listing order (most recently updated first) and folder filtering
    ✅ Update is a full replace and always moves updated_at forward
    ✅ Attach/remove file semantics, including the no-op remove
    ✅ Missing notes raise NotFoundError; delete is idempotent
    ✅ Store errors surface as StoreUnavailableError
    ✅ Concurrent file adds on one note keep every file
"""

import asyncio
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Text, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from foldernotes.exceptions import NotFoundError, StoreUnavailableError
from foldernotes.models import DEFAULT_NOTE_CONTENT, DEFAULT_NOTE_TITLE, Note
from foldernotes.schemas.note import NoteFileIn, NoteUpdate
from foldernotes.services.note_service import NoteService, touch

from conftest import BASE_TIME


def png_file(name: str = "pixel.png") -> NoteFileIn:
    return NoteFileIn(
        name=name,
        size=68,
        type="image/png",
        data="data:image/png;base64,iVBORw0KGgo=",
        is_image=True,
    )


class TestNoteServiceCreate:
    """Tests for create_note."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_without_title_uses_defaults(self, db_session):
        """A note created with only a folder gets the default title and body."""
        note = await self.service.create_note(db_session, folder_id="folder-1")

        assert note.folder_id == "folder-1"
        assert note.title == DEFAULT_NOTE_TITLE == "New note"
        assert note.content == DEFAULT_NOTE_CONTENT == "<p>Start writing...</p>"
        assert note.files == []
        assert note.created_at == note.updated_at

    @pytest.mark.asyncio
    async def test_empty_strings_fall_back_to_defaults(self, db_session):
        note = await self.service.create_note(db_session, "folder-1", title="", content="")
        assert note.title == "New note"
        assert note.content == "<p>Start writing...</p>"

    @pytest.mark.asyncio
    async def test_create_keeps_given_fields(self, db_session):
        note = await self.service.create_note(
            db_session, "folder-1", title="Groceries", content="<p>milk</p>"
        )
        assert note.title == "Groceries"
        assert note.content == "<p>milk</p>"

    @pytest.mark.asyncio
    async def test_unknown_folder_id_is_stored_as_given(self, db_session):
        """Folder ids are not checked against existing folders."""
        note = await self.service.create_note(db_session, "does-not-exist")
        notes = await self.service.list_notes(db_session, folder_id="does-not-exist")
        assert [n.id for n in notes] == [note.id]

    @pytest.mark.asyncio
    async def test_ids_are_distinct(self, db_session):
        a = await self.service.create_note(db_session, "f")
        b = await self.service.create_note(db_session, "f")
        assert a.id != b.id


class TestNoteServiceList:
    """Tests for list_notes."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_most_recently_updated_first(self, db_session, make_note):
        await make_note("f1", title="old", minutes=0)
        await make_note("f1", title="newest", minutes=10)
        await make_note("f1", title="middle", minutes=5)

        notes = await self.service.list_notes(db_session, folder_id="f1")

        assert [n.title for n in notes] == ["newest", "middle", "old"]

    @pytest.mark.asyncio
    async def test_filters_by_folder(self, db_session, make_note):
        await make_note("f1", title="in f1")
        await make_note("f2", title="in f2")

        notes = await self.service.list_notes(db_session, folder_id="f2")

        assert [n.title for n in notes] == ["in f2"]

    @pytest.mark.asyncio
    async def test_unknown_folder_lists_nothing(self, db_session, make_note):
        await make_note("f1")
        assert await self.service.list_notes(db_session, folder_id="nope") == []

    @pytest.mark.asyncio
    async def test_list_all_includes_every_folder(self, db_session, make_note):
        await make_note("f1", title="a", minutes=1)
        await make_note(None, title="orphan", minutes=2)
        await make_note("f2", title="b", minutes=3)

        notes = await self.service.list_notes(db_session)

        assert [n.title for n in notes] == ["b", "orphan", "a"]

    @pytest.mark.asyncio
    async def test_timestamps_come_back_timezone_aware(self, db_session, make_note):
        await make_note("f1")
        (note,) = await self.service.list_notes(db_session)
        assert note.updated_at.tzinfo is not None
        assert note.updated_at == BASE_TIME


class TestNoteServiceUpdate:
    """Tests for update_note."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_replaces_title_content_and_files(self, db_session, make_note):
        stored = await make_note("f1", title="before")

        updated = await self.service.update_note(
            db_session,
            stored.id,
            NoteUpdate(title="after", content="<p>new</p>", files=[png_file()]),
        )

        assert updated.title == "after"
        assert updated.content == "<p>new</p>"
        assert len(updated.files) == 1
        assert updated.files[0].name == "pixel.png"
        assert updated.files[0].id
        assert updated.folder_id == "f1"
        assert updated.created_at == stored.created_at

    @pytest.mark.asyncio
    async def test_updated_at_strictly_increases(self, db_session):
        note = await self.service.create_note(db_session, "f1")

        first = await self.service.update_note(db_session, note.id, NoteUpdate(title="1"))
        second = await self.service.update_note(db_session, note.id, NoteUpdate(title="2"))

        assert first.updated_at > note.updated_at
        assert second.updated_at > first.updated_at

    @pytest.mark.asyncio
    async def test_missing_fields_are_cleared(self, db_session, make_note):
        """Update is a full replace: absent fields overwrite stored values."""
        stored = await make_note("f1", title="keep?", files=[{"id": "x", "name": "a"}])

        updated = await self.service.update_note(db_session, stored.id, NoteUpdate())

        assert updated.title is None
        assert updated.content is None
        assert updated.files == []

    @pytest.mark.asyncio
    async def test_echoed_files_keep_their_ids(self, db_session):
        note = await self.service.create_note(db_session, "f1")
        with_file = await self.service.add_file(db_session, note.id, png_file())
        file_id = with_file.files[0].id

        echoed = NoteFileIn(**with_file.files[0].model_dump())
        updated = await self.service.update_note(
            db_session, note.id, NoteUpdate(title="t", files=[echoed, png_file("b.png")])
        )

        assert updated.files[0].id == file_id
        assert updated.files[1].id not in (None, file_id)

    @pytest.mark.asyncio
    async def test_repeated_file_id_gets_a_fresh_one(self, db_session):
        note = await self.service.create_note(db_session, "f1")
        dup = NoteFileIn(id="same", name="a.txt")

        updated = await self.service.update_note(
            db_session, note.id, NoteUpdate(files=[dup, dup])
        )

        ids = [f.id for f in updated.files]
        assert ids[0] == "same"
        assert len(set(ids)) == 2

    @pytest.mark.asyncio
    async def test_missing_note_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update_note(db_session, "missing", NoteUpdate(title="x"))
        assert exc_info.value.message == "Note not found"


class TestNoteServiceDelete:
    """Tests for delete_note."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_delete_removes_note(self, db_session):
        note = await self.service.create_note(db_session, "f1")

        assert await self.service.delete_note(db_session, note.id) is True
        assert await self.service.list_notes(db_session) == []

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, db_session):
        note = await self.service.create_note(db_session, "f1")
        await self.service.delete_note(db_session, note.id)

        assert await self.service.delete_note(db_session, note.id) is False
        assert await self.service.delete_note(db_session, "never-existed") is False


class TestNoteServiceFiles:
    """Tests for add_file / remove_file."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_add_file_appends_with_new_id(self, db_session):
        note = await self.service.create_note(db_session, "f1")

        first = await self.service.add_file(db_session, note.id, png_file("a.png"))
        second = await self.service.add_file(db_session, note.id, png_file("b.png"))

        assert [f.name for f in second.files] == ["a.png", "b.png"]
        assert second.files[0].id == first.files[0].id
        assert second.files[1].id != second.files[0].id
        assert second.files[1].is_image is True
        assert second.updated_at > first.updated_at > note.updated_at

    @pytest.mark.asyncio
    async def test_add_file_ignores_client_id(self, db_session):
        note = await self.service.create_note(db_session, "f1")
        file = png_file()
        file.id = "client-chosen"

        updated = await self.service.add_file(db_session, note.id, file)

        assert updated.files[0].id != "client-chosen"

    @pytest.mark.asyncio
    async def test_add_file_persists(self, db_session, database):
        note = await self.service.create_note(db_session, "f1")
        await self.service.add_file(db_session, note.id, png_file())

        async with database.session() as fresh:
            result = await fresh.execute(select(Note).where(Note.id == note.id))
            stored = result.scalar_one()
            assert stored.files[0]["isImage"] is True
            assert stored.files[0]["data"].startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_add_file_missing_note_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.add_file(db_session, "missing", png_file())
        assert await self.service.list_notes(db_session) == []

    @pytest.mark.asyncio
    async def test_remove_file(self, db_session):
        note = await self.service.create_note(db_session, "f1")
        await self.service.add_file(db_session, note.id, png_file("a.png"))
        both = await self.service.add_file(db_session, note.id, png_file("b.png"))

        updated = await self.service.remove_file(db_session, note.id, both.files[0].id)

        assert [f.name for f in updated.files] == ["b.png"]
        assert updated.updated_at > both.updated_at

    @pytest.mark.asyncio
    async def test_remove_unknown_file_still_touches(self, db_session):
        """An unknown file id leaves the list alone but counts as a mutation."""
        note = await self.service.create_note(db_session, "f1")
        with_file = await self.service.add_file(db_session, note.id, png_file())

        updated = await self.service.remove_file(db_session, note.id, "no-such-file")

        assert updated.files == with_file.files
        assert updated.updated_at > with_file.updated_at

    @pytest.mark.asyncio
    async def test_remove_file_missing_note_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.remove_file(db_session, "missing", "file")


class TestTouch:
    """Tests for the updated_at bump."""

    def test_touch_moves_past_future_timestamp(self):
        future = BASE_TIME + timedelta(days=365 * 100)
        note = Note(updated_at=future)

        touch(note)

        assert note.updated_at == future + timedelta(microseconds=1)

    def test_touch_uses_current_time(self):
        note = Note(updated_at=BASE_TIME)
        touch(note)
        assert note.updated_at > BASE_TIME


class TestNoteServiceStoreErrors:
    """Store failures are wrapped, carrying the driver message."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_list_wraps_store_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("database is locked")
        )

        with pytest.raises(StoreUnavailableError) as exc_info:
            await self.service.list_notes(mock_db_session)
        assert "database is locked" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_create_wraps_commit_error(self, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError(
            "INSERT", {}, Exception("disk I/O error")
        )

        with pytest.raises(StoreUnavailableError) as exc_info:
            await self.service.create_note(mock_db_session, "f1")
        assert "disk I/O error" in exc_info.value.message


class TestNoteServiceConcurrency:
    """Mutations of one note from separate sessions must not overwrite each other."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_concurrent_adds_keep_every_file(self, database):
        async with database.session() as session:
            note = await self.service.create_note(session, "f1")

        async def attach(i: int):
            async with database.session() as session:
                return await self.service.add_file(session, note.id, png_file(f"{i}.png"))

        results = await asyncio.gather(*(attach(i) for i in range(8)))

        async with database.session() as session:
            (stored,) = await self.service.list_notes(session)
        assert len(stored.files) == 8
        assert {f.name for f in stored.files} == {f"{i}.png" for i in range(8)}
        assert sorted(len(r.files) for r in results) == list(range(1, 9))

    @pytest.mark.asyncio
    async def test_concurrent_add_and_remove(self, database):
        async with database.session() as session:
            note = await self.service.create_note(session, "f1")
            first = await self.service.add_file(session, note.id, png_file("keep-out.png"))
        doomed = first.files[0].id

        async def add():
            async with database.session() as session:
                await self.service.add_file(session, note.id, png_file("new.png"))

        async def remove():
            async with database.session() as session:
                await self.service.remove_file(session, note.id, doomed)

        await asyncio.gather(add(), remove(), add())

        async with database.session() as session:
            (stored,) = await self.service.list_notes(session)
        assert [f.name for f in stored.files] == ["new.png", "new.png"]

    @pytest.mark.asyncio
    async def test_mutations_lock_the_row(self, mock_db_session):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = result

        with pytest.raises(NotFoundError):
            await self.service.add_file(mock_db_session, "n1", png_file())

        statement = mock_db_session.execute.await_args.args[0]
        sql = str(statement.compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql

    def test_folder_id_column_is_unbounded(self):
        assert isinstance(Note.__table__.c.folder_id.type, Text)
