"""Tests for the `nesting-indexer` CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import yaml
from click.testing import CliRunner

from nesting_indexer import __version__
from nesting_indexer.cli import main
from nesting_indexer.db import SCHEMA_VERSION, get_meta, open_db, set_meta

if TYPE_CHECKING:
    from pathlib import Path


def _write_graph(project: Path, objects: list[dict[str, object]]) -> None:
    graph_dir = project / ".nesting_indexer" / "_graph"
    (graph_dir / "objects.yml").write_text(yaml.dump({"objects": objects}))


def _chain_project(project: Path) -> Path:
    _write_graph(
        project,
        [
            {"id": "A"},
            {"id": "B", "member_of": ["A"]},
            {"id": "C", "member_of": ["B"]},
        ],
    )
    return project


class TestVersion:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestReindexAllCommand:
    def test_builds_index(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()

        result = runner.invoke(main, ["reindex-all", "--project", str(project)])

        assert result.exit_code == 0, result.output
        assert "Documents: 3" in result.output
        db_path = project / ".nesting_indexer" / "index.db"
        assert db_path.exists()
        conn = open_db(db_path)
        assert get_meta(conn, "nesting_indexer_version") == __version__
        assert get_meta(conn, "last_reindex_at") is not None
        conn.close()

    def test_cycle_exits_nonzero(self, tmp_project: Path) -> None:
        _write_graph(
            tmp_project,
            [{"id": "A", "member_of": ["B"]}, {"id": "B", "member_of": ["A"]}],
        )
        runner = CliRunner()

        result = runner.invoke(main, ["reindex-all", "--hops", "3", "--project", str(tmp_project)])

        assert result.exit_code == 1
        assert "Possible graph cycle" in result.output

    def test_missing_graph_dir(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["reindex-all", "--project", str(tmp_path)])
        assert result.exit_code == 1
        assert "graph directory not found" in result.output


class TestReindexCommand:
    def test_full_pass(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        result = runner.invoke(main, ["reindex", "A", "--project", str(project)])

        assert result.exit_code == 0, result.output
        assert "Mode:      full" in result.output
        assert "Processed: 3" in result.output

    def test_descendants_only_json(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        result = runner.invoke(
            main,
            ["reindex", "B", "--descendants-only", "--json", "--project", str(project)],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data == {"start_id": "B", "mode": "descendants_only", "processed": ["C"]}

    def test_picks_up_new_membership(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        _write_graph(
            project,
            [
                {"id": "A"},
                {"id": "Z"},
                {"id": "B", "member_of": ["A", "Z"]},
                {"id": "C", "member_of": ["B"]},
            ],
        )
        runner.invoke(main, ["reindex", "Z", "--project", str(project)])
        runner.invoke(main, ["reindex", "B", "--project", str(project)])

        result = runner.invoke(main, ["show", "C", "--json", "--project", str(project)])
        data = json.loads(result.output)
        assert data["pathnames"] == ["A/B/C", "Z/B/C"]
        assert data["ancestors"] == ["A", "A/B", "Z", "Z/B"]

    def test_unknown_id(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        result = runner.invoke(main, ["reindex", "ghost", "--project", str(project)])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "ghost" in result.output

    def test_missing_parent_index(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        result = runner.invoke(main, ["reindex", "B", "--project", str(project)])
        assert result.exit_code == 1
        assert "has no index document" in result.output

    def test_hops_from_config(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])
        (project / ".nesting_indexer" / "config.yml").write_text("hop_ceiling: 2\n")

        result = runner.invoke(main, ["reindex", "A", "--project", str(project)])
        assert result.exit_code == 1
        assert "Possible graph cycle" in result.output

        result = runner.invoke(main, ["reindex", "A", "--hops", "3", "--project", str(project)])
        assert result.exit_code == 0, result.output

    def test_bad_config(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        (project / ".nesting_indexer" / "config.yml").write_text("hop_ceiling: 0\n")
        runner = CliRunner()
        result = runner.invoke(main, ["reindex", "A", "--project", str(project)])
        assert result.exit_code == 1
        assert "hop_ceiling" in result.output

    def test_quiet_suppresses_summary(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        result = runner.invoke(main, ["-q", "reindex", "A", "--project", str(project)])
        assert result.exit_code == 0, result.output
        assert "Processed" not in result.output


class TestShowCommand:
    def test_show_rich(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        result = runner.invoke(main, ["show", "C", "--project", str(project)])

        assert result.exit_code == 0, result.output
        assert "A/B/C" in result.output
        assert "Ancestors" in result.output

    def test_show_unknown(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        result = runner.invoke(main, ["show", "ghost", "--project", str(project)])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_show_without_index(self, tmp_project: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "A", "--project", str(tmp_project)])
        assert result.exit_code == 1
        assert "index not found" in result.output

    def test_warns_on_schema_version_mismatch(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])
        conn = open_db(project / ".nesting_indexer" / "index.db")
        set_meta(conn, "schema_version", "0")
        conn.close()

        result = runner.invoke(main, ["show", "A", "--json", "--project", str(project)])
        assert result.exit_code == 0
        assert f"index schema version 0 != {SCHEMA_VERSION}" in result.output

        runner.invoke(main, ["reindex-all", "--project", str(project)])
        result = runner.invoke(main, ["show", "A", "--json", "--project", str(project)])
        assert "schema version" not in result.output


class TestChildrenAndClear:
    def test_children(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        result = runner.invoke(main, ["children", "A", "--project", str(project)])
        assert result.exit_code == 0
        assert result.output.strip() == "B"

        result = runner.invoke(main, ["children", "C", "--project", str(project)])
        assert "No children." in result.output

    def test_clear(self, tmp_project: Path) -> None:
        project = _chain_project(tmp_project)
        runner = CliRunner()
        runner.invoke(main, ["reindex-all", "--project", str(project)])

        result = runner.invoke(main, ["clear", "--project", str(project)])
        assert result.exit_code == 0
        assert "Index cleared." in result.output

        result = runner.invoke(main, ["show", "A", "--project", str(project)])
        assert result.exit_code == 1
