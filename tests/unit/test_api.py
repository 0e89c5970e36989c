"""
Unit tests for the HTTP service (FastAPI TestClient).

Each test gets its own snapshot path, so startup begins from an empty index
unless the test writes a snapshot first.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from paper_engine.config import Settings
from paper_engine.index import UnknownRecordTag
from paper_engine.main import create_app, lifespan
from paper_engine.snapshot import load_snapshot


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "cache.pec"


@pytest.fixture
def app(cache_path):
    return create_app(Settings(cache_path=str(cache_path)))


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def papers(tmp_path):
    """Worked corpus as text files: D1 = cat cat dog, D2 = dog dog dog"""
    d1 = tmp_path / "d1.txt"
    d1.write_text("cat cat dog", encoding="utf-8")
    d2 = tmp_path / "d2.txt"
    d2.write_text("dog dog dog", encoding="utf-8")
    return str(d1), str(d2)


class TestSubmit:

    def test_submit(self, client, papers):
        response = client.get("/api/document/submit", params={"path": papers[0]})

        assert response.status_code == 200
        assert response.json() == {
            "status": "indexed",
            "title": papers[0],
            "path": papers[0],
            "distinct_terms": 2,
        }

    def test_missing_path(self, client):
        response = client.get("/api/document/submit")
        assert response.status_code == 400
        assert "Missing `path`" in response.json()["detail"]

    def test_not_a_file(self, client, tmp_path):
        response = client.get("/api/document/submit", params={"path": str(tmp_path / "nope.txt")})
        assert response.status_code == 400
        assert "is not a file" in response.json()["detail"]

    def test_unknown_dupe_policy(self, client, papers):
        response = client.get("/api/document/submit", params={"path": papers[0], "dupe": "merge"})
        assert response.status_code == 400

    def test_duplicate_title_conflict(self, client, papers):
        client.get("/api/document/submit", params={"path": papers[0]})
        response = client.get("/api/document/submit", params={"path": papers[0]})

        assert response.status_code == 409
        assert "identical titles" in response.json()["detail"]

    def test_duplicate_rename(self, client, papers):
        client.get("/api/document/submit", params={"path": papers[0]})
        response = client.get("/api/document/submit", params={"path": papers[0], "dupe": "rename"})

        assert response.status_code == 200
        assert response.json()["title"] == papers[0] + "-1"

    def test_duplicate_ignore(self, client, papers):
        client.get("/api/document/submit", params={"path": papers[0]})
        response = client.get("/api/document/submit", params={"path": papers[0], "dupe": "ignore"})

        assert response.status_code == 200
        assert response.json()["status"] == "ignored"
        assert client.get("/health").json()["documents"] == 1


class TestSearch:

    def test_search_ranked(self, client, papers):
        for path in papers:
            client.get("/api/document/submit", params={"path": path})

        response = client.get("/api/document/search", params={"s": "Cats"})

        assert response.status_code == 200
        assert response.json() == [{"score": 17609, "path": papers[0], "title": papers[0]}]

    def test_search_tie_order(self, client, papers):
        for path in papers:
            client.get("/api/document/submit", params={"path": path})

        hits = client.get("/api/document/search", params={"s": "dog"}).json()

        assert [hit["title"] for hit in hits] == [papers[1], papers[0]]
        assert all(hit["score"] == 0 for hit in hits)

    def test_missing_query(self, client):
        assert client.get("/api/document/search").status_code == 400

    def test_empty_index(self, client):
        response = client.get("/api/document/search", params={"s": "anything"})
        assert response.json() == []


class TestInfoAndHealth:

    def test_info(self, client, papers):
        client.get("/api/document/submit", params={"path": papers[0]})
        response = client.get("/api/document/info", params={"title": papers[0]})

        assert response.status_code == 200
        assert response.json() == {"title": papers[0], "path": papers[0], "distinct_terms": 2}

    def test_info_missing(self, client):
        assert client.get("/api/document/info", params={"title": "nope"}).status_code == 404

    def test_health(self, client, papers):
        for path in papers:
            client.get("/api/document/submit", params={"path": path})

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["documents"] == 2
        assert body["terms"] == 2

    def test_root(self, client):
        assert client.get("/").json()["service"] == "Paper Engine API"


class TestLifespan:
    """Snapshot loaded at startup and written at shutdown"""

    def test_snapshot_written_on_shutdown(self, app, cache_path, papers):
        with TestClient(app) as client:
            client.get("/api/document/submit", params={"path": papers[0]})

        assert sorted(load_snapshot(cache_path).titles()) == [papers[0]]

    def test_snapshot_restored_on_startup(self, cache_path, papers):
        with TestClient(create_app(Settings(cache_path=str(cache_path)))) as client:
            for path in papers:
                client.get("/api/document/submit", params={"path": path})

        with TestClient(create_app(Settings(cache_path=str(cache_path)))) as client:
            assert client.get("/health").json()["documents"] == 2
            hits = client.get("/api/document/search", params={"s": "cat"}).json()
            assert hits == [{"score": 17609, "path": papers[0], "title": papers[0]}]

    def test_oversized_token_rejected_and_snapshot_kept(self, app, cache_path, papers, tmp_path):
        """A token too long for a snapshot record fails that submit only"""
        blob = tmp_path / "blob.txt"
        blob.write_text("a" * 70000, encoding="utf-8")

        with TestClient(app) as client:
            assert client.get("/api/document/submit", params={"path": papers[0]}).status_code == 200
            response = client.get("/api/document/submit", params={"path": str(blob)})

            assert response.status_code == 400
            assert "65535" in response.json()["detail"]
            assert client.get("/health").json()["documents"] == 1

        assert cache_path.exists()
        assert load_snapshot(cache_path).titles() == [papers[0]]

    def test_corrupted_snapshot_prevents_startup(self, app, cache_path):
        cache_path.write_bytes(b"\x7f")

        async def start():
            async with lifespan(app):
                pass

        with pytest.raises(UnknownRecordTag):
            asyncio.run(start())
