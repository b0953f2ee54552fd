from __future__ import annotations

import pytest

from tagger.database.repos.file_repo import SqlAlchemyFileRepo
from tagger.database.repos.tag_repo import SqlAlchemyTagRepo
from tagger.domain.entities.file import File
from tagger.domain.errors import EntityNotFound
from tagger.services.tagging import TaggingService


@pytest.fixture()
def svc(session_factory) -> TaggingService:
    return TaggingService(session_factory)


def test_tag_file_tracks_file_and_tag_on_demand(svc):
    assert svc.get_file("/data/a.txt") is None
    assert svc.get_tag("todo") is None

    link = svc.tag_file("/data/a.txt", "todo")

    f = svc.get_file("/data/a.txt")
    t = svc.get_tag("todo")
    assert isinstance(f, File)
    assert (link.file_id, link.tag_id) == (f.id, t.id)
    assert svc.store.exists(f.id, t.id)


def test_track_file_and_ensure_tag_are_get_or_create(svc):
    f1 = svc.track_file("/data/a.txt")
    f2 = svc.track_file("/data/a.txt")
    assert f1.id == f2.id

    t1 = svc.ensure_tag("Read Later")
    t2 = svc.ensure_tag("read_later")
    assert t1.id == t2.id
    assert t1.slug == "read-later"


def test_search_returns_files_ordered(svc):
    svc.tag_file("/data/b.txt", "work")
    svc.tag_file("/data/a.txt", "work")
    svc.tag_file("/data/c.txt", "home")

    assert [f.filename for f in svc.search("work")] == ["/data/a.txt", "/data/b.txt"]
    assert [f.filename for f in svc.search("home")] == ["/data/c.txt"]


def test_search_unknown_tag(svc):
    with pytest.raises(EntityNotFound):
        svc.search("nothing")


def test_tags_of_and_untag(svc):
    svc.tag_file("/data/a.txt", "beta")
    svc.tag_file("/data/a.txt", "alpha")

    assert [t.name for t in svc.tags_of("/data/a.txt")] == ["alpha", "beta"]
    assert svc.tags_of("/data/unknown") == []

    svc.untag_file("/data/a.txt", "beta")
    svc.untag_file("/data/a.txt", "beta")
    svc.untag_file("/data/unknown", "beta")
    assert [t.name for t in svc.tags_of("/data/a.txt")] == ["alpha"]


def test_forget_file_and_delete_tag_cascade(svc):
    svc.tag_file("/data/a.txt", "x")
    svc.tag_file("/data/b.txt", "x")
    svc.tag_file("/data/b.txt", "y")

    svc.forget_file("/data/a.txt")
    assert [f.filename for f in svc.search("x")] == ["/data/b.txt"]

    svc.delete_tag("x")
    assert [t.name for t in svc.tags_of("/data/b.txt")] == ["y"]

    with pytest.raises(EntityNotFound):
        svc.forget_file("/data/a.txt")
    with pytest.raises(EntityNotFound):
        svc.delete_tag("x")


def _stale_for(n: int, real):
    """A lookup that misses a committed row for its first `n` calls."""
    calls = {"n": 0}

    def lookup(self, key):
        calls["n"] += 1
        return None if calls["n"] <= n else real(self, key)
    return lookup


def test_track_file_losing_a_create_race_returns_existing(svc, monkeypatch):
    first = svc.track_file("/data/raced.txt")

    monkeypatch.setattr(
        SqlAlchemyFileRepo, "get_by_filename", _stale_for(2, SqlAlchemyFileRepo.get_by_filename)
    )
    again = svc.track_file("/data/raced.txt")
    assert again.id == first.id


def test_ensure_tag_losing_a_create_race_returns_existing(svc, monkeypatch):
    first = svc.ensure_tag("Raced")

    monkeypatch.setattr(SqlAlchemyTagRepo, "get_by_name", _stale_for(2, SqlAlchemyTagRepo.get_by_name))
    again = svc.ensure_tag("raced")
    assert again.id == first.id
