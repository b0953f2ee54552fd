# tests/services/test_file_tags_api.py
from __future__ import annotations

from typing import Any, Dict

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from tagger.database.repos.file_tag_repo import SqlAlchemyFileTagRepo


def _mk_file(api_client, filename: str) -> Dict[str, Any]:
    r = api_client.post("/api/files", json={"filename": filename})
    assert r.status_code == 201, r.text
    return r.json()


def _mk_tag(api_client, name: str) -> Dict[str, Any]:
    r = api_client.post("/api/tags", json={"name": name})
    assert r.status_code == 201, r.text
    return r.json()


def test_healthz(api_client):
    r = api_client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_files_and_tags_crud(api_client):
    f = _mk_file(api_client, "/data/a.txt")
    assert f["filename"] == "/data/a.txt"
    assert isinstance(f["id"], int)

    r = api_client.post("/api/files", json={"filename": "/data/a.txt"})
    assert r.status_code == 409, r.text

    r = api_client.get(f"/api/files/{f['id']}")
    assert r.status_code == 200 and r.json()["id"] == f["id"]

    r = api_client.get("/api/files", params={"filename": "/data/a.txt"})
    assert [x["id"] for x in r.json()] == [f["id"]]

    t = _mk_tag(api_client, "Holiday Photos")
    assert t["slug"] == "holiday-photos"

    r = api_client.post("/api/tags", json={"name": "holiday_photos"})
    assert r.status_code == 409, r.text

    r = api_client.post("/api/tags", json={"name": "   "})
    assert r.status_code == 422, r.text

    r = api_client.get("/api/tags", params={"name": "HOLIDAY photos"})
    assert [x["id"] for x in r.json()] == [t["id"]]

    r = api_client.delete(f"/api/tags/{t['id']}")
    assert r.status_code == 204
    r = api_client.get(f"/api/tags/{t['id']}")
    assert r.status_code == 404

    r = api_client.delete(f"/api/files/{f['id']}")
    assert r.status_code == 204
    r = api_client.delete(f"/api/files/{f['id']}")
    assert r.status_code == 404


def test_attach_list_and_detach(api_client):
    f1 = _mk_file(api_client, "/data/1")
    f2 = _mk_file(api_client, "/data/2")
    t10 = _mk_tag(api_client, "ten")
    t20 = _mk_tag(api_client, "twenty")

    for fid, tid in [(f1["id"], t10["id"]), (f1["id"], t20["id"]), (f2["id"], t10["id"])]:
        r = api_client.post(f"/api/files/{fid}/tags", json={"tag_id": tid})
        assert r.status_code == 201, r.text
        assert r.json() == {"file_id": fid, "tag_id": tid}

    # idempotent attach
    r = api_client.post(f"/api/files/{f1['id']}/tags", json={"tag_id": t10["id"]})
    assert r.status_code == 201, r.text

    r = api_client.get(f"/api/files/{f1['id']}/tags")
    assert r.status_code == 200
    assert r.json() == {"file_id": f1["id"], "tag_ids": sorted([t10["id"], t20["id"]])}

    r = api_client.get(f"/api/tags/{t10['id']}/files")
    assert r.json() == {"tag_id": t10["id"], "file_ids": sorted([f1["id"], f2["id"]])}

    r = api_client.get(f"/api/files/{f2['id']}/tags/{t20['id']}")
    assert r.json()["exists"] is False

    r = api_client.delete(f"/api/files/{f1['id']}/tags/{t10['id']}")
    assert r.status_code == 204
    r = api_client.delete(f"/api/files/{f1['id']}/tags/{t10['id']}")
    assert r.status_code == 204

    r = api_client.get(f"/api/files/{f1['id']}/tags/{t10['id']}")
    assert r.json()["exists"] is False


def test_attach_to_missing_entities_is_404(api_client):
    f = _mk_file(api_client, "/data/only-file")
    t = _mk_tag(api_client, "only-tag")

    r = api_client.post("/api/files/999999/tags", json={"tag_id": t["id"]})
    assert r.status_code == 404
    assert r.json()["detail"] == "File not found"

    r = api_client.post(f"/api/files/{f['id']}/tags", json={"tag_id": 999999})
    assert r.status_code == 404
    assert r.json()["detail"] == "Tag not found"

    r = api_client.get(f"/api/files/{f['id']}/tags")
    assert r.json()["tag_ids"] == []


def test_deleting_file_removes_its_associations(api_client):
    f = _mk_file(api_client, "/data/doomed")
    keep = _mk_file(api_client, "/data/keeper")
    t = _mk_tag(api_client, "shared")
    api_client.post(f"/api/files/{f['id']}/tags", json={"tag_id": t["id"]})
    api_client.post(f"/api/files/{keep['id']}/tags", json={"tag_id": t["id"]})

    r = api_client.delete(f"/api/files/{f['id']}")
    assert r.status_code == 204

    r = api_client.get(f"/api/tags/{t['id']}/files")
    assert r.json()["file_ids"] == [keep["id"]]


def _pair(api_client, filename: str, tag: str):
    return _mk_file(api_client, filename)["id"], _mk_tag(api_client, tag)["id"]


def test_attach_losing_a_duplicate_race_is_still_201(api_client, monkeypatch):
    fid, tid = _pair(api_client, "/data/race", "race")
    r = api_client.post(f"/api/files/{fid}/tags", json={"tag_id": tid})
    assert r.status_code == 201

    real_exists = SqlAlchemyFileTagRepo.exists
    calls = {"n": 0}

    def stale_then_real(self, file_id, tag_id):
        # the first check misses the row another writer just committed
        calls["n"] += 1
        return False if calls["n"] == 1 else real_exists(self, file_id, tag_id)

    monkeypatch.setattr(SqlAlchemyFileTagRepo, "exists", stale_then_real)
    r = api_client.post(f"/api/files/{fid}/tags", json={"tag_id": tid})
    assert r.status_code == 201, r.text
    assert r.json() == {"file_id": fid, "tag_id": tid}

    monkeypatch.undo()
    r = api_client.get(f"/api/files/{fid}/tags")
    assert r.json()["tag_ids"] == [tid]


def test_attach_when_file_vanishes_mid_request_is_404(api_client, monkeypatch):
    _, tid = _pair(api_client, "/data/present", "vanish")
    real_require = SqlAlchemyFileTagRepo.require_entities
    calls = {"n": 0}

    def passes_then_real(self, file_id, tag_id):
        # the file is deleted between the check and the insert
        calls["n"] += 1
        if calls["n"] > 1:
            real_require(self, file_id, tag_id)

    monkeypatch.setattr(SqlAlchemyFileTagRepo, "require_entities", passes_then_real)
    r = api_client.post("/api/files/999999/tags", json={"tag_id": tid})
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "File not found"


def test_attach_unclassified_integrity_error_is_409(api_client, monkeypatch):
    fid, tid = _pair(api_client, "/data/odd", "odd")

    def boom(self, file_id, tag_id):
        raise IntegrityError("INSERT INTO file_tags", {}, Exception("CHECK constraint failed"))

    monkeypatch.setattr(SqlAlchemyFileTagRepo, "add", boom)
    r = api_client.post(f"/api/files/{fid}/tags", json={"tag_id": tid})
    assert r.status_code == 409, r.text

    monkeypatch.undo()
    assert api_client.get(f"/api/files/{fid}/tags").json()["tag_ids"] == []


def test_attach_on_locked_database_is_409(api_client, monkeypatch):
    fid, tid = _pair(api_client, "/data/locked", "locked")

    def locked(self, file_id, tag_id):
        raise OperationalError("INSERT INTO file_tags", {}, Exception("database is locked"))

    monkeypatch.setattr(SqlAlchemyFileTagRepo, "add", locked)
    r = api_client.post(f"/api/files/{fid}/tags", json={"tag_id": tid})
    assert r.status_code == 409, r.text


def test_attach_other_operational_errors_propagate(api_client, monkeypatch):
    fid, tid = _pair(api_client, "/data/broken", "broken")

    def gone(self, file_id, tag_id):
        raise OperationalError("INSERT INTO file_tags", {}, Exception("no such table: file_tags"))

    monkeypatch.setattr(SqlAlchemyFileTagRepo, "add", gone)
    with pytest.raises(OperationalError):
        api_client.post(f"/api/files/{fid}/tags", json={"tag_id": tid})
