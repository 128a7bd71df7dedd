"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from knowledgescout.cli import _ensure_db_parent, _setup_logging, app
from knowledgescout.errors import StorageError
from knowledgescout.index.storage import SQLiteChunkStore


runner = CliRunner()

AI_TEXT = (
    "Artificial intelligence is a branch of computer science. "
    "Machine learning is a subset of AI."
)


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    folder = tmp_path / "docs"
    folder.mkdir()
    (folder / "ai.txt").write_text(AI_TEXT, encoding="utf-8")
    (folder / "fruit.md").write_text("Bananas are yellow.\n\nApples are red.", encoding="utf-8")
    (folder / "ignored.pdf").write_bytes(b"%PDF-1.4")
    return folder


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        with patch("knowledgescout.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        with patch("knowledgescout.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestEnsureDbParent:
    """Tests for _ensure_db_parent helper."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "subdir" / "test.db"
        _ensure_db_parent(db_path)
        assert db_path.parent.exists()


class TestIndexCommand:
    """Tests for the index command."""

    def test_no_text_files(self, tmp_path: Path) -> None:
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()

        result = runner.invoke(app, ["index", str(empty_dir), "--db", str(tmp_path / "t.db")])

        assert result.exit_code == 0
        assert "No text files found" in result.stdout

    def test_index_folder(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "t.db"

        result = runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        assert result.exit_code == 0
        assert "Inserted: 2, skipped: 0, failed: 0" in result.stdout
        assert db_path.exists()

    def test_reindex_skips_unchanged(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        result = runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        assert "Inserted: 0, skipped: 2, failed: 0" in result.stdout

    def test_reindex_skips_crlf_file(self, tmp_path: Path) -> None:
        folder = tmp_path / "crlf"
        folder.mkdir()
        (folder / "a.txt").write_bytes(
            b"First paragraph here.\r\n\r\nSecond paragraph here.\r\n"
        )
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(folder), "--db", str(db_path)])

        result = runner.invoke(app, ["index", str(folder), "--db", str(db_path)])

        assert "Inserted: 0, skipped: 1, failed: 0" in result.stdout
        store = SQLiteChunkStore(db_path)
        try:
            assert store.count_documents() == 1
        finally:
            store.close()


class TestAskCommand:
    """Tests for the ask command."""

    def test_database_missing(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["ask", "anything", "--db", str(tmp_path / "none.db")])

        assert result.exit_code != 0

    def test_answers_question(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        result = runner.invoke(app, ["ask", "What is machine learning?", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "definition" in result.stdout
        assert "Machine learning is a subset of AI" in result.stdout

    def test_invalid_k(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        result = runner.invoke(app, ["ask", "machine", "-k", "42", "--db", str(db_path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestRebuildAndStats:
    """Tests for the rebuild and stats commands."""

    def test_stats_before_rebuild(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        result = runner.invoke(app, ["stats", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "last rebuild: never" in result.stdout

    def test_rebuild_then_stats(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        rebuilt = runner.invoke(app, ["rebuild", "--db", str(db_path)])
        stats = runner.invoke(app, ["stats", "--db", str(db_path)])

        assert rebuilt.exit_code == 0
        assert "Index rebuild completed: processed 2/2" in rebuilt.stdout
        assert "Documents: 2, chunks: 2" in stats.stdout

    def test_stats_storage_failure(self, corpus: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        runner.invoke(app, ["index", str(corpus), "--db", str(db_path)])

        with patch("knowledgescout.cli.ChunkIndex.stats", side_effect=StorageError("locked")):
            result = runner.invoke(app, ["stats", "--db", str(db_path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestUnreadableDatabase:
    """Commands report a non-database file instead of crashing."""

    @pytest.fixture
    def bad_db(self, tmp_path: Path) -> Path:
        path = tmp_path / "t.db"
        path.write_bytes(b"plain text, not sqlite\n" * 100)
        return path

    @pytest.mark.parametrize("command", [["stats"], ["rebuild"], ["ask", "machine"]])
    def test_reports_error(self, bad_db: Path, command: list) -> None:
        result = runner.invoke(app, [*command, "--db", str(bad_db)])

        assert result.exit_code == 1
        assert "Unable to open database" in result.stdout

    def test_index_reports_error(self, corpus: Path, bad_db: Path) -> None:
        result = runner.invoke(app, ["index", str(corpus), "--db", str(bad_db)])

        assert result.exit_code == 1
        assert "Unable to open database" in result.stdout
