"""Tests for table context descriptors and semantic search."""

from __future__ import annotations

import pytest

from tablesmith import Tablesmith
from tablesmith.exceptions import (
    ContextNotFoundError,
    EmbeddingDimensionError,
    EmbeddingError,
    InvalidIdentifierError,
    TableNotFoundError,
    ValidationError,
)


@pytest.fixture
def db(memory_db: Tablesmith) -> Tablesmith:
    for name in ("travelers", "invoices", "aircraft"):
        memory_db.create_table(name, [{"name": "label", "type": "TEXT"}])
    return memory_db


class TestSave:
    def test_save_and_get(self, db: Tablesmith) -> None:
        saved = db.save_context("travelers", "People booked on summer charters")

        assert saved.table_name == "travelers"
        assert saved.description == "People booked on summer charters"
        assert saved.dimensions == 32
        assert len(saved.embedding) == 32
        assert saved.model == "test-hashing"
        assert saved.created_at is not None
        assert db.get_context("travelers") == saved

    def test_description_is_trimmed(self, db: Tablesmith) -> None:
        saved = db.save_context("travelers", "  People on charters \n")
        assert saved.description == "People on charters"

    def test_second_save_replaces(self, db: Tablesmith, fake_provider) -> None:
        first = db.save_context("travelers", "People on charters")
        second = db.save_context("travelers", "Invoices and payments")

        assert len(db.list_contexts()) == 1
        assert second.id == first.id
        assert second.description == "Invoices and payments"
        assert second.embedding == fake_provider.embed("Invoices and payments")
        assert second.embedding != first.embedding

    def test_save_under_other_case_keeps_one_context(self, db: Tablesmith) -> None:
        db.save_context("travelers", "People on charters")
        saved = db.save_context("Travelers", "Invoices and payments")

        assert saved.table_name == "travelers"
        assert [c.table_name for c in db.list_contexts()] == ["travelers"]
        assert db.get_context("TRAVELERS").description == "Invoices and payments"

    @pytest.mark.parametrize("description", ["", "   ", None, 42])
    def test_empty_description(self, db: Tablesmith, description: object) -> None:
        with pytest.raises(ValidationError):
            db.save_context("travelers", description)  # type: ignore[arg-type]
        assert db.list_contexts() == []

    def test_missing_table(self, db: Tablesmith) -> None:
        with pytest.raises(TableNotFoundError):
            db.save_context("ghosts", "Nothing here")

    def test_invalid_table_name(self, db: Tablesmith) -> None:
        with pytest.raises(InvalidIdentifierError):
            db.save_context("bad name", "Nothing here")

    def test_embedding_failure_persists_nothing(self, failing_provider) -> None:
        database = Tablesmith("sqlite:///:memory:", embedding_provider=failing_provider)
        database.create_table("travelers", [{"name": "label", "type": "TEXT"}])
        with pytest.raises(EmbeddingError):
            database.save_context("travelers", "People on charters")
        assert database.list_contexts() == []
        database.close()

    def test_embedding_failure_keeps_previous(self, db: Tablesmith, fake_provider) -> None:
        db.save_context("travelers", "People on charters")

        def broken(text: str) -> list[float]:
            raise RuntimeError("model crashed")

        fake_provider.embed = broken
        with pytest.raises(EmbeddingError):
            db.save_context("travelers", "Replacement")
        assert db.get_context("travelers").description == "People on charters"

    def test_dimension_mismatch(self, db: Tablesmith, fake_provider) -> None:
        db.save_context("travelers", "People on charters")
        fake_provider._dimensions = 16

        with pytest.raises(EmbeddingDimensionError) as exc_info:
            db.save_context("invoices", "Money owed by customers")
        assert exc_info.value.expected == 32
        assert exc_info.value.actual == 16

    def test_resave_only_context_with_new_dimensions(self, db: Tablesmith, fake_provider) -> None:
        db.save_context("travelers", "People on charters")
        fake_provider._dimensions = 16
        assert db.save_context("travelers", "People on charters").dimensions == 16


class TestReadAndDelete:
    def test_get_missing(self, db: Tablesmith) -> None:
        with pytest.raises(ContextNotFoundError):
            db.get_context("travelers")

    def test_list_ordered_by_table_name(self, db: Tablesmith) -> None:
        db.save_context("travelers", "People")
        db.save_context("aircraft", "Planes")
        assert [c.table_name for c in db.list_contexts()] == ["aircraft", "travelers"]

    def test_delete(self, db: Tablesmith) -> None:
        db.save_context("travelers", "People")
        assert db.delete_context("travelers") is True
        assert db.delete_context("travelers") is False
        assert db.table_exists("travelers")

    def test_delete_under_other_case(self, db: Tablesmith) -> None:
        db.save_context("travelers", "People")
        assert db.delete_context("Travelers") is True
        assert db.list_contexts() == []

    def test_public_dump_omits_embedding(self, db: Tablesmith) -> None:
        saved = db.save_context("travelers", "People")
        assert "embedding" not in saved.to_public()
        assert len(saved.to_public(include_embedding=True)["embedding"]) == 32


class TestSearch:
    @pytest.fixture
    def described(self, db: Tablesmith) -> Tablesmith:
        db.save_context("travelers", "passengers booked on summer charter flights")
        db.save_context("invoices", "unpaid invoices and customer payments")
        db.save_context("aircraft", "aircraft fleet maintenance schedule")
        return db

    def test_closest_first(self, described: Tablesmith) -> None:
        results = described.search_contexts("unpaid customer invoices")

        assert len(results) == 3
        assert results[0].context.table_name == "invoices"
        distances = [r.distance for r in results]
        assert distances == sorted(distances)

    def test_limit(self, described: Tablesmith) -> None:
        assert len(described.search_contexts("charter passengers", limit=1)) == 1
        assert len(described.search_contexts("charter passengers", limit="2")) == 2
        assert described.search_contexts("charter passengers", limit=0) == []

    def test_no_contexts(self, db: Tablesmith, fake_provider) -> None:
        assert db.search_contexts("anything") == []
        assert fake_provider.calls == []

    @pytest.mark.parametrize("query", ["", "  ", None])
    def test_empty_query(self, described: Tablesmith, query: object) -> None:
        with pytest.raises(ValidationError):
            described.search_contexts(query)  # type: ignore[arg-type]

    def test_bad_limit(self, described: Tablesmith) -> None:
        with pytest.raises(ValidationError):
            described.search_contexts("planes", limit="-1")

    def test_dropped_table_leaves_search(self, described: Tablesmith) -> None:
        described.drop_table("invoices")
        names = [r.context.table_name for r in described.search_contexts("invoices")]
        assert sorted(names) == ["aircraft", "travelers"]
