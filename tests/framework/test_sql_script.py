"""Tests for SqlScriptCommand."""

import sys

import pytest

from commander.core.errors import ScriptParseError, ScriptPathError, StatementExecutionError
from commander.core.settings import CommanderSettings
from commander.framework.commands import CommandContext, SqlScriptCommand
from commander.scripts.repository import DirectoryLocation, Script, ScriptRepository
from tests.helpers import count_rows, table_exists

INIT = "CREATE TABLE IF NOT EXISTS t (id INTEGER);"


def repository(path):
    return ScriptRepository([DirectoryLocation(path)])


class TestIdentity:
    def test_name_and_order(self):
        assert SqlScriptCommand.name == "SQL_SCRIPT"
        assert SqlScriptCommand.order == -sys.maxsize - 1

    def test_from_settings(self, make_script_dir):
        path = make_script_dir({"001_init.sql": INIT})
        settings = CommanderSettings(script={"path": str(path), "always_reload": True, "delimiter": "GO"})

        cmd = SqlScriptCommand.from_settings(settings)

        assert cmd.always_reload is True
        assert cmd.delimiter == "GO"
        assert [loc.label for loc in cmd.repository.locations][-1] == str(path)


class TestExecution:
    def test_two_inserts(self, conn, make_script_dir):
        path = make_script_dir(
            {
                "001_init.sql": "CREATE TABLE t (id INTEGER);",
                "002_seed.sql": "INSERT INTO t VALUES (1);\nINSERT INTO t VALUES (2);",
            }
        )
        SqlScriptCommand(repository(path)).execute(CommandContext(conn=conn))
        assert [row[0] for row in conn.execute("SELECT id FROM t ORDER BY id").fetchall()] == [1, 2]

    def test_run_script_returns_statement_count(self, conn):
        cmd = SqlScriptCommand(ScriptRepository([]))
        script = Script(name="x.sql", body="CREATE TABLE x (id INTEGER); INSERT INTO x VALUES (1);", location="mem")
        assert cmd.run_script(CommandContext(conn=conn), script) == 2

    def test_failure_stops_remaining_statements(self, conn, make_script_dir):
        path = make_script_dir(
            {"001_bad.sql": "CREATE TABLE ok (id INTEGER);\nINSERT INTO missing VALUES (1);\nCREATE TABLE never (id INTEGER);"}
        )
        cmd = SqlScriptCommand(repository(path))

        with pytest.raises(StatementExecutionError) as exc_info:
            cmd.execute(CommandContext(conn=conn))

        err = exc_info.value
        assert err.context.script == "001_bad.sql"
        assert err.context.statement_index == 2
        assert err.context.location == str(path)
        assert "missing" in err.message
        assert err.__cause__ is not None
        assert table_exists(conn, "ok")
        assert not table_exists(conn, "never")

    def test_failure_stops_remaining_scripts(self, conn, make_script_dir):
        path = make_script_dir({"001_bad.sql": "SELECT * FROM missing;", "002_next.sql": "CREATE TABLE never (id INTEGER);"})
        with pytest.raises(StatementExecutionError):
            SqlScriptCommand(repository(path)).execute(CommandContext(conn=conn))
        assert not table_exists(conn, "never")

    def test_parse_error_names_script(self, conn, make_script_dir):
        path = make_script_dir({"001_broken.sql": "INSERT INTO t VALUES ('oops);"})
        with pytest.raises(ScriptParseError) as exc_info:
            SqlScriptCommand(repository(path)).execute(CommandContext(conn=conn))
        assert exc_info.value.context.script == "001_broken.sql"

    def test_empty_script_runs_nothing(self, conn, make_script_dir):
        path = make_script_dir({"001_empty.sql": "-- nothing yet\n"})
        SqlScriptCommand(repository(path)).execute(CommandContext(conn=conn))


class TestCacheMode:
    def test_discovers_once_at_construction(self, conn, make_script_dir):
        path = make_script_dir({"001_init.sql": INIT, "002_seed.sql": "INSERT INTO t VALUES (1);"})
        cmd = SqlScriptCommand(repository(path))
        assert cmd.discovery_count == 1

        for _ in range(3):
            cmd.execute(CommandContext(conn=conn))

        assert cmd.discovery_count == 1
        assert count_rows(conn, "t") == 3

    def test_new_files_ignored_after_load(self, conn, make_script_dir):
        path = make_script_dir({"001_init.sql": INIT})
        cmd = SqlScriptCommand(repository(path))
        (path / "002_seed.sql").write_text("INSERT INTO t VALUES (1);")

        cmd.execute(CommandContext(conn=conn))

        assert count_rows(conn, "t") == 0

    def test_empty_result_is_retained(self, conn, make_script_dir):
        path = make_script_dir({})
        cmd = SqlScriptCommand(repository(path))
        assert cmd.loaded_scripts == []

        (path / "001_init.sql").write_text(INIT)
        cmd.execute(CommandContext(conn=conn))

        assert cmd.discovery_count == 1
        assert not table_exists(conn, "t")

    def test_missing_path_fails_at_construction(self, tmp_path):
        with pytest.raises(ScriptPathError):
            SqlScriptCommand(repository(tmp_path / "missing"))

    def test_failed_discovery_is_retried(self, conn, tmp_path):
        path = tmp_path / "later"
        cmd = SqlScriptCommand(repository(path), eager=False)
        assert cmd.loaded_scripts is None

        with pytest.raises(ScriptPathError):
            cmd.execute(CommandContext(conn=conn))
        assert cmd.loaded_scripts is None

        path.mkdir()
        (path / "001_init.sql").write_text(INIT)
        cmd.execute(CommandContext(conn=conn))

        assert [s.name for s in cmd.loaded_scripts] == ["001_init.sql"]
        assert table_exists(conn, "t")

    def test_lazy_load_on_first_execute(self, conn, make_script_dir):
        path = make_script_dir({"001_init.sql": INIT})
        cmd = SqlScriptCommand(repository(path), eager=False)
        assert cmd.discovery_count == 0
        cmd.execute(CommandContext(conn=conn))
        cmd.execute(CommandContext(conn=conn))
        assert cmd.discovery_count == 1


class TestReloadMode:
    def test_discovers_on_every_execute(self, conn, make_script_dir):
        path = make_script_dir({"001_init.sql": INIT})
        cmd = SqlScriptCommand(repository(path), always_reload=True)
        assert cmd.discovery_count == 0

        for _ in range(3):
            cmd.execute(CommandContext(conn=conn))

        assert cmd.discovery_count == 3
        assert cmd.loaded_scripts is None

    def test_picks_up_new_files(self, conn, make_script_dir):
        path = make_script_dir({"001_init.sql": INIT})
        cmd = SqlScriptCommand(repository(path), always_reload=True)
        cmd.execute(CommandContext(conn=conn))

        (path / "002_seed.sql").write_text("INSERT INTO t VALUES (1);")
        cmd.execute(CommandContext(conn=conn))

        assert count_rows(conn, "t") == 1

    def test_missing_path_fails_at_execute(self, conn, tmp_path):
        cmd = SqlScriptCommand(repository(tmp_path / "missing"), always_reload=True)
        with pytest.raises(ScriptPathError):
            cmd.execute(CommandContext(conn=conn))
