from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from constraint_validations.constraints.assembler import Reraise, ValidationFailure
from constraint_validations.constraints.binding import TableBinding
from constraint_validations.constraints.messages import DEFAULT_ERROR_MESSAGES
from constraint_validations.database.base import Base
from constraint_validations.models import Album, Artist
from constraint_validations.tests.test_fixtures.violation_fixtures import (
    UNIQUE,
    FakeCatalog,
    fake_connection,
    make_integrity_error,
)


class RecentAlbum(Base):
    """Mapped to a subquery, so there is no single table to introspect."""
    __table__ = select(Album.__table__).where(Album.__table__.c.release_year > 2000).subquery("recent_albums")


class TestTableBinding:

    def test_for_model_uses_local_table(self):
        binding = TableBinding.for_model(Album)
        assert binding.source is Album.__table__
        assert binding.metadata is None
        assert binding.bound is False
        assert binding.messages == DEFAULT_ERROR_MESSAGES
        assert binding.name == "albums"

    def test_for_model_with_messages(self):
        binding = TableBinding.for_model(Album, messages={"unique": "is already in use"})
        assert binding.messages["unique"] == "is already in use"

    def test_bind_builds_snapshot_once(self):
        catalog = FakeCatalog(unique_indexes=[("uq_albums_artist_id_name", "artist_id")])
        binding = TableBinding.for_model(Album).bind(fake_connection(), catalog=catalog)

        assert binding.bound is True
        assert binding.metadata.unique_indexes == {"uq_albums_artist_id_name": ("artist_id",)}
        assert binding.name == "public.albums"
        assert catalog.calls.count("resolve") == 1

    def test_bind_returns_new_binding(self):
        unbound = TableBinding.for_model(Album)
        bound = unbound.bind(fake_connection(), catalog=FakeCatalog())
        assert unbound.metadata is None
        assert bound.metadata is not None

    def test_subquery_model_has_no_metadata(self):
        catalog = FakeCatalog()
        binding = TableBinding.for_model(RecentAlbum).bind(fake_connection(), catalog=catalog)

        assert binding.bound is True
        assert binding.metadata is None
        assert catalog.calls == []

    def test_unsupported_driver_has_no_metadata(self):
        binding = TableBinding.for_model(Album).bind(fake_connection("sqlite", "pysqlite"), catalog=FakeCatalog())
        assert binding.metadata is None

    def test_rebind_clears_metadata(self, album_binding):
        rebound = album_binding.rebind(Artist.__table__)
        assert rebound.source is Artist.__table__
        assert rebound.metadata is None
        assert rebound.bound is False
        assert album_binding.metadata is not None

    def test_with_messages_shares_snapshot(self, album_binding):
        derived = album_binding.with_messages({"unique": "is already in use"})
        assert derived.metadata is album_binding.metadata
        assert derived.messages["unique"] == "is already in use"
        assert album_binding.messages["unique"] == "is already taken"

    def test_with_messages_merges_onto_parent(self, album_binding):
        child = album_binding.with_messages({"unique": "taken"}).with_messages({"check": "bad"})
        assert child.messages["unique"] == "taken"
        assert child.messages["check"] == "bad"

    def test_convert(self, album_binding):
        exc = make_integrity_error(UNIQUE, schema="public", table="albums", constraint="uq_albums_artist_id_name")
        assert album_binding.convert(exc) == ValidationFailure(((("artist_id", "name"), "is already taken"),))

    def test_convert_unbound(self):
        exc = make_integrity_error(UNIQUE, schema="public", table="albums", constraint="uq_albums_artist_id_name")
        assert TableBinding.for_model(Album).convert(exc) == Reraise(exc)

    async def test_bind_async_with_connection(self):
        bound = TableBinding.for_model(Album, messages={"check": "bad"})
        connection = MagicMock()
        connection.run_sync = AsyncMock(return_value=bound)

        result = await TableBinding.for_model(Album).bind_async(connection)

        assert result is bound
        connection.run_sync.assert_awaited_once()


def test_name_before_binding():
    assert TableBinding(source="music.albums").name == "music.albums"
    assert TableBinding(source="albums").name == "albums"


def test_default_messages_without_argument():
    binding = TableBinding(source="albums")
    assert binding.messages == DEFAULT_ERROR_MESSAGES
    assert binding.metadata is None


def test_binding_is_hashable(album_binding):
    same = TableBinding(source=Album.__table__, metadata=album_binding.metadata, bound=True)
    assert hash(album_binding) == hash(same)
    assert len({album_binding, same, album_binding.with_messages({"unique": "taken"})}) == 2


async def test_bind_async_with_engine_checks_out_a_connection():
    bound = TableBinding.for_model(Album, messages={"check": "bad"})
    connection = MagicMock()
    connection.run_sync = AsyncMock(return_value=bound)
    engine = MagicMock(spec=AsyncEngine)
    engine.connect.return_value.__aenter__.return_value = connection

    result = await TableBinding.for_model(Album).bind_async(engine)

    assert result is bound
    engine.connect.assert_called_once_with()
    connection.run_sync.assert_awaited_once()
    engine.connect.return_value.__aexit__.assert_awaited_once()
