"""Integration tests for the full Tablesmith workflow."""

from concurrent.futures import ThreadPoolExecutor

from tablesmith import Tablesmith


def run_workflow(db: Tablesmith) -> None:
    """Define, fill, describe, search and tear down two tables."""
    # 1. Define tables
    db.create_table(
        "travelers",
        [
            {"name": "name", "type": "VARCHAR(255)", "nullable": False},
            {"name": "age", "type": "INTEGER"},
            {"name": "preferences", "type": "JSONB"},
        ],
    )
    db.create_table(
        "invoices",
        [{"name": "amount", "type": "REAL"}, {"name": "paid", "type": "BOOLEAN"}],
    )
    assert db.list_tables() == ["invoices", "travelers"]

    # 2. Fill them
    travelers = db.table("travelers")
    ada = travelers.insert({"name": "Ada", "age": 36, "preferences": {"seat": "window"}})
    travelers.insert_many([{"name": "Grace", "age": 45}, {"name": "Linus"}])
    db.table("invoices").insert({"amount": 120.5, "paid": False})

    # 3. Evolve a table
    db.alter_table("travelers", {"name": "email", "type": "TEXT"})
    updated = travelers.update(ada["id"], {"email": "ada@example.com"})
    assert updated["email"] == "ada@example.com"
    assert updated["preferences"] == {"seat": "window"}

    page = travelers.select(limit=2)
    assert page.total_count == 3
    assert [r["name"] for r in page.rows] == ["Ada", "Grace"]

    # 4. Describe and search
    db.save_context("travelers", "passengers booked on summer charter flights")
    db.save_context("invoices", "unpaid invoices and customer payments")
    results = db.search_contexts("which customer payments are unpaid", limit=1)
    assert [r.context.table_name for r in results] == ["invoices"]

    info = db.describe_table("travelers")
    assert info.row_count == 3
    assert info.has_context is True
    assert info.has_update_trigger is True

    # 5. Tear down
    assert travelers.delete(ada["id"]) == 1
    assert travelers.delete(ada["id"]) == 0
    assert db.drop_table("travelers") is True
    assert db.drop_table("invoices") is True
    assert db.list_tables() == []
    assert db.list_contexts() == []


class TestFullWorkflow:
    """End-to-end tests for Tablesmith."""

    def test_sqlite_workflow(self, memory_db: Tablesmith) -> None:
        run_workflow(memory_db)

    def test_postgresql_workflow(self, pg_db: Tablesmith) -> None:
        run_workflow(pg_db)

    def test_data_survives_reopen(self, file_db_url: str, fake_provider) -> None:
        with Tablesmith(file_db_url, embedding_provider=fake_provider) as db:
            db.create_table("notes", [{"name": "body", "type": "TEXT"}])
            db.table("notes").insert({"body": "remember the milk"})
            db.save_context("notes", "personal reminders")

        with Tablesmith(file_db_url, embedding_provider=fake_provider) as db:
            assert db.list_tables() == ["notes"]
            assert db.table("notes").select().rows[0]["body"] == "remember the milk"
            assert db.get_context("notes").description == "personal reminders"
            # Trigger persisted with the table
            assert db.describe_table("notes").has_update_trigger is True

    def test_concurrent_inserts(self, file_db_url: str, fake_provider) -> None:
        with Tablesmith(file_db_url, embedding_provider=fake_provider) as db:
            db.create_table("events", [{"name": "worker", "type": "INTEGER"}])
            events = db.table("events")

            def write(worker: int) -> list[int]:
                return [events.insert({"worker": worker})["id"] for _ in range(10)]

            with ThreadPoolExecutor(max_workers=4) as pool:
                ids = [i for batch in pool.map(write, range(4)) for i in batch]

            assert len(set(ids)) == 40
            assert events.count() == 40
