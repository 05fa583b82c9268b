"""Tests for the REST API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tablesmith import Tablesmith
from tablesmith.api import create_app

TRAVELERS = {
    "tableName": "travelers",
    "columns": [
        {"name": "name", "type": "VARCHAR(255)"},
        {"name": "age", "type": "INTEGER", "nullable": False},
    ],
}


@pytest.fixture
def client(memory_db: Tablesmith) -> TestClient:
    return TestClient(create_app(memory_db))


@pytest.fixture
def seeded(client: TestClient) -> TestClient:
    assert client.post("/tables/create", json=TRAVELERS).status_code == 200
    client.post(
        "/data/bulk-add",
        json={
            "tableName": "travelers",
            "data": [{"name": "Ada", "age": 36}, {"name": "Grace", "age": 45}],
        },
    )
    return client


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"success": True, "status": "ok", "database": "sqlite"}


class TestTables:
    def test_create(self, client: TestClient) -> None:
        response = client.post("/tables/create", json=TRAVELERS)
        assert response.status_code == 200
        assert response.json() == {"success": True, "tableName": "travelers"}

    def test_create_same_definition_twice(self, client: TestClient) -> None:
        client.post("/tables/create", json=TRAVELERS)
        assert client.post("/tables/create", json=TRAVELERS).status_code == 200

    def test_create_conflict(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/tables/create",
            json={"tableName": "travelers", "columns": [{"name": "x", "type": "TEXT"}]},
        )
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["details"]["type"] == "SchemaConflictError"

    @pytest.mark.parametrize(
        "payload",
        [
            {"tableName": "bad-name", "columns": [{"name": "x", "type": "TEXT"}]},
            {"tableName": "notes", "columns": [{"name": "x", "type": "BLOB"}]},
            {"tableName": "notes", "columns": [{"name": "id", "type": "TEXT"}]},
            {"tableName": "notes", "columns": []},
            {"columns": [{"name": "x", "type": "TEXT"}]},
        ],
    )
    def test_create_invalid(self, client: TestClient, payload: dict) -> None:
        response = client.post("/tables/create", json=payload)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_list(self, seeded: TestClient) -> None:
        assert seeded.get("/tables/list").json() == {"success": True, "tables": ["travelers"]}

    def test_schema(self, seeded: TestClient) -> None:
        body = seeded.get("/tables/travelers/schema").json()
        assert body["tableName"] == "travelers"
        assert body["columns"] == [
            {"name": "name", "type": "VARCHAR(255)", "nullable": True},
            {"name": "age", "type": "INTEGER", "nullable": False},
        ]

    def test_schema_missing(self, client: TestClient) -> None:
        response = client.get("/tables/ghosts/schema")
        assert response.status_code == 404
        assert response.json()["details"]["table_name"] == "ghosts"

    def test_alter(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/tables/alter",
            json={"tableName": "travelers", "columnName": "nickname", "columnType": "TEXT"},
        )
        assert response.status_code == 200
        assert response.json()["column"] == {"name": "nickname", "type": "TEXT", "nullable": True}

    def test_alter_existing_column(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/tables/alter",
            json={"tableName": "travelers", "columnName": "age", "columnType": "INTEGER"},
        )
        assert response.status_code == 409

    def test_delete(self, seeded: TestClient) -> None:
        assert seeded.delete("/tables/travelers").json() == {"success": True, "dropped": True}
        assert seeded.delete("/tables/travelers").json() == {"success": True, "dropped": False}
        assert seeded.get("/tables/list").json()["tables"] == []


class TestData:
    def test_add(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/data/add", json={"tableName": "travelers", "data": {"name": "Linus", "age": 28}}
        )
        assert response.status_code == 200
        row = response.json()["data"]
        assert row["name"] == "Linus"
        assert row["id"] is not None
        assert row["created_at"] is not None

    def test_bulk_add(self, client: TestClient) -> None:
        client.post("/tables/create", json=TRAVELERS)
        response = client.post(
            "/data/bulk-add",
            json={"tableName": "travelers", "data": [{"age": 1}, {"name": "B", "age": 2}]},
        )
        body = response.json()
        assert body["count"] == 2
        assert [r["age"] for r in body["data"]] == [1, 2]
        assert body["data"][0]["name"] is None

    def test_add_unknown_column(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/data/add", json={"tableName": "travelers", "data": {"age": 1, "planet": "Mars"}}
        )
        assert response.status_code == 400
        assert response.json()["details"]["type"] == "UnknownColumnError"

    def test_add_to_missing_table(self, client: TestClient) -> None:
        response = client.post("/data/add", json={"tableName": "ghosts", "data": {"x": 1}})
        assert response.status_code == 404

    def test_add_constraint_violation(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/data/add", json={"tableName": "travelers", "data": {"name": "X"}}
        )
        assert response.status_code == 500
        assert response.json()["details"]["type"] == "QueryError"

    def test_get_rows(self, seeded: TestClient) -> None:
        body = seeded.get("/data/travelers", params={"limit": 1, "offset": 1}).json()
        assert [r["name"] for r in body["data"]] == ["Grace"]
        assert body["pagination"] == {"limit": 1, "offset": 1, "total": 2}

    def test_get_rows_defaults(self, seeded: TestClient) -> None:
        body = seeded.get("/data/travelers").json()
        assert body["pagination"] == {"limit": 100, "offset": 0, "total": 2}

    @pytest.mark.parametrize("params", [{"limit": "abc"}, {"limit": "-1"}, {"offset": "1.5"}])
    def test_get_rows_bad_pagination(self, seeded: TestClient, params: dict) -> None:
        assert seeded.get("/data/travelers", params=params).status_code == 400

    def test_update(self, seeded: TestClient) -> None:
        row_id = seeded.get("/data/travelers").json()["data"][0]["id"]
        response = seeded.put(f"/data/travelers/{row_id}", json={"age": 37})
        assert response.status_code == 200
        assert response.json()["data"]["age"] == 37

    def test_update_missing_row(self, seeded: TestClient) -> None:
        response = seeded.put("/data/travelers/999999", json={"age": 1})
        assert response.status_code == 404
        assert response.json()["details"]["type"] == "RecordNotFoundError"

    def test_update_empty(self, seeded: TestClient) -> None:
        row_id = seeded.get("/data/travelers").json()["data"][0]["id"]
        assert seeded.put(f"/data/travelers/{row_id}", json={}).status_code == 400

    def test_delete(self, seeded: TestClient) -> None:
        row_id = seeded.get("/data/travelers").json()["data"][0]["id"]
        response = seeded.delete(f"/data/travelers/{row_id}")
        assert response.json() == {"success": True, "deleted": 1}

    def test_delete_missing_row_succeeds(self, seeded: TestClient) -> None:
        response = seeded.delete("/data/travelers/999999")
        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted": 0}

    def test_bad_row_id(self, seeded: TestClient) -> None:
        assert seeded.delete("/data/travelers/abc").status_code == 400

    def test_row_id_beyond_64_bits(self, seeded: TestClient) -> None:
        response = seeded.delete("/data/travelers/99999999999999999999")
        assert response.status_code == 400
        assert response.json()["details"]["field_errors"] == {"id": "out of range"}
        response = seeded.put("/data/travelers/99999999999999999999", json={"age": 1})
        assert response.status_code == 400

    def test_limit_beyond_64_bits(self, seeded: TestClient) -> None:
        response = seeded.get("/data/travelers", params={"limit": "99999999999999999999"})
        assert response.status_code == 400

    def test_value_too_large_for_column(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/data/add", json={"tableName": "travelers", "data": {"name": "X", "age": 2**64}}
        )
        assert response.status_code == 500
        assert response.json()["details"]["type"] == "QueryError"


class TestContext:
    def test_save_get_list_delete(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/context", json={"tableName": "travelers", "description": "  Charter passengers "}
        )
        assert response.status_code == 200
        context = response.json()["context"]
        assert context["description"] == "Charter passengers"
        assert context["dimensions"] == 32
        assert "embedding" not in context

        assert seeded.get("/context/travelers").json()["context"]["id"] == context["id"]
        assert [c["table_name"] for c in seeded.get("/context").json()["contexts"]] == [
            "travelers"
        ]
        assert seeded.delete("/context/travelers").json() == {"success": True, "deleted": True}
        assert seeded.get("/context/travelers").status_code == 404

    def test_save_for_missing_table(self, client: TestClient) -> None:
        response = client.post("/context", json={"tableName": "ghosts", "description": "x"})
        assert response.status_code == 404

    def test_save_empty_description(self, seeded: TestClient) -> None:
        response = seeded.post("/context", json={"tableName": "travelers", "description": " "})
        assert response.status_code == 400

    def test_search(self, seeded: TestClient) -> None:
        seeded.post(
            "/tables/create",
            json={"tableName": "invoices", "columns": [{"name": "amount", "type": "REAL"}]},
        )
        descriptions = {"travelers": "charter passengers", "invoices": "unpaid bills"}
        for name, description in descriptions.items():
            seeded.post("/context", json={"tableName": name, "description": description})

        response = seeded.get("/search/context", params={"q": "unpaid bills", "limit": 2})
        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["table_name"] for r in results][0] == "invoices"
        assert results[0]["distance"] <= results[1]["distance"]
        assert "embedding" not in results[0]

    def test_search_requires_query(self, client: TestClient) -> None:
        assert client.get("/search/context").status_code == 400

    def test_table_named_search(self, client: TestClient) -> None:
        client.post(
            "/tables/create",
            json={"tableName": "search", "columns": [{"name": "term", "type": "TEXT"}]},
        )
        client.post("/context", json={"tableName": "search", "description": "Past queries"})

        response = client.get("/context/search")
        assert response.status_code == 200
        assert response.json()["context"]["table_name"] == "search"
        assert client.delete("/context/search").json() == {"success": True, "deleted": True}

    def test_embedding_failure_is_500(self, failing_provider, fake_generator) -> None:
        database = Tablesmith(
            "sqlite:///:memory:", embedding_provider=failing_provider, generator=fake_generator
        )
        database.create_table("travelers", [{"name": "name", "type": "TEXT"}])
        client = TestClient(create_app(database))

        response = client.post("/context", json={"tableName": "travelers", "description": "x"})
        assert response.status_code == 500
        assert response.json()["details"]["type"] == "EmbeddingError"
        assert client.get("/context").json()["contexts"] == []
        database.close()


class TestChat:
    def test_chat(self, seeded: TestClient) -> None:
        response = seeded.post(
            "/chat", json={"message": "Who is over 30?", "tableName": "travelers"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["sql"] == "SELECT name FROM travelers WHERE age > 30;"
        assert body["tables"] == ["travelers"]

    def test_chat_history(self, seeded: TestClient, fake_generator) -> None:
        seeded.post(
            "/chat",
            json={
                "message": "And the youngest?",
                "chatHistory": [{"role": "user", "content": "Oldest?"}],
            },
        )
        assert "USER: Oldest?" in fake_generator.prompts[-1]

    def test_chat_missing_table(self, seeded: TestClient) -> None:
        response = seeded.post("/chat", json={"message": "Hi", "tableName": "ghosts"})
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"message": "Hi", "topK": 0},
            {"message": "Hi", "chatHistory": [{"role": "system", "content": "x"}]},
        ],
    )
    def test_chat_invalid(self, client: TestClient, payload: dict) -> None:
        assert client.post("/chat", json=payload).status_code == 400
