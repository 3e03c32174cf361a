"""Tests for the stash command line."""

import sys
from pathlib import Path

import pytest
from loguru import logger

from stash.cli.main import create_parser, main


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures loguru; put the default sink back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def run(monkeypatch, tmp_path: Path, capsys):
    """Run the CLI against a temporary database and return (exit code, captured output)."""
    monkeypatch.setenv("STASH_DB_PATH", str(tmp_path / "cli.db"))

    def _run(*argv: str):
        monkeypatch.setattr(sys, "argv", ["stash", *argv])
        with pytest.raises(SystemExit) as exc:
            main()
        return exc.value.code, capsys.readouterr()

    return _run


class TestParser:
    """Tests for argument parsing."""

    def test_category_add(self):
        args = create_parser().parse_args(["category", "add", "Recipes"])

        assert args.command == "category"
        assert args.category_cmd == "add"
        assert args.name == "Recipes"
        assert args.verbose is False

    def test_verbose_flag(self):
        args = create_parser().parse_args(["-v", "maintenance"])

        assert args.verbose is True
        assert args.command == "maintenance"

    def test_item_add_options(self):
        args = create_parser().parse_args(
            ["item", "add", "Pasta", "-c", "Food", "-u", "https://e.x", "-m", "a=b", "-m", "c=d"]
        )

        assert args.category == "Food"
        assert args.url == "https://e.x"
        assert args.meta == ["a=b", "c=d"]

    def test_category_move_position_is_int(self):
        args = create_parser().parse_args(["category", "move", "Food", "2"])

        assert args.position == 2

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["category"])


class TestCommands:
    """End-to-end command runs."""

    def test_no_command_prints_help(self, run):
        code, output = run()

        assert code == 0
        assert "usage" in output.out

    def test_category_add_and_list(self, run):
        assert run("category", "add", "Recipes")[0] == 0

        code, output = run("category", "list")

        assert code == 0
        assert "Recipes" in output.out

    def test_duplicate_category_fails(self, run):
        run("category", "add", "Recipes")

        code, output = run("category", "add", "recipes")

        assert code == 1
        assert "already exists" in output.err

    def test_rename_and_delete(self, run):
        run("category", "add", "Travel")
        run("item", "add", "Trip", "-c", "Travel")

        assert run("category", "rename", "travel", "Trips")[0] == 0
        code, output = run("category", "delete", "Trips")

        assert code == 0
        assert "Moved 1 item(s) to Misc" in output.out

    def test_item_add_and_search(self, run):
        run("item", "add", "Sourdough", "-c", "Food", "-u", "https://bake.example")

        code, output = run("item", "search", "sourdough")

        assert code == 0
        assert "Sourdough" in output.out
        assert "Food" in output.out

    def test_item_search_ignores_accents_and_filters_category(self, run):
        run("item", "add", "Crème brûlée", "-c", "Food")
        run("item", "add", "Creme cleaner", "-c", "Home")

        code, output = run("item", "search", "CREME", "-c", "Food")

        assert code == 0
        assert "Crème brûlée" in output.out
        assert "Creme cleaner" not in output.out

    def test_move_category(self, run):
        for name in ("A", "B", "C"):
            run("category", "add", name)

        code, output = run("category", "move", "C", "0")

        assert code == 0
        assert "C, A, B" in output.out

    def test_maintenance(self, run):
        code, output = run("maintenance")

        assert code == 0
        assert "Duplicate categories removed: 0" in output.out

    def test_backup_export_import(self, run, tmp_path: Path):
        run("item", "add", "Pasta", "-c", "Food")

        assert run("backup", "export", str(tmp_path / "backups"))[0] == 0
        code, output = run("backup", "import", str(tmp_path / "backups"))

        assert code == 0
        assert "Imported 1 categories, 1 items" in output.out

    def test_unknown_item(self, run):
        code, output = run("item", "hide", "missing-id")

        assert code == 1
        assert "Content item not found" in output.err
