"""Tests for script discovery."""

import uuid

import pytest

from commander.core.errors import ConfigError, DiscoveryError, ScriptPathError
from commander.core.settings import ScriptSettings
from commander.framework.filters import NameFilter
from commander.scripts.repository import (
    DirectoryLocation,
    PackageLocation,
    ScriptRepository,
    discover,
    matches_pattern,
)


@pytest.fixture
def make_script_package(tmp_path, monkeypatch):
    """Create an importable package holding ``files`` and return its name."""

    def _make(files):
        name = f"sqlpkg_{uuid.uuid4().hex[:8]}"
        root = tmp_path / "pkgs"
        package = root / name
        package.mkdir(parents=True)
        (package / "__init__.py").write_text("")
        for file_name, body in files.items():
            (package / file_name).write_text(body, encoding="utf-8")
        monkeypatch.syspath_prepend(str(root))
        return name

    return _make


class TestMatchesPattern:
    @pytest.mark.parametrize(
        "name, prefix, suffix, expected",
        [
            ("001_init.sql", "", "", True),
            ("001_init.SQL", "", "", False),
            ("notes.txt", "", "", False),
            ("V1__init.sql", "V", "", True),
            ("init.sql", "V", "", False),
            ("V2_seed.sql", "V", "_seed", True),
            ("V2_schema.sql", "V", "_seed", False),
            ("V_seed.sql", "V", "_seed", True),
            ("V.sql", "V.sql", "", False),
        ],
    )
    def test_pattern(self, name, prefix, suffix, expected):
        assert matches_pattern(name, prefix, suffix) is expected


class TestDiscover:
    def test_sorted_by_name_across_locations(self, make_script_dir):
        first = make_script_dir({"002_b.sql": "SELECT 2;"}, name="first")
        second = make_script_dir({"003_c.sql": "SELECT 3;", "001_a.sql": "SELECT 1;"}, name="second")

        scripts = discover([DirectoryLocation(first), DirectoryLocation(second)])

        assert [s.name for s in scripts] == ["001_a.sql", "002_b.sql", "003_c.sql"]
        assert [s.body for s in scripts] == ["SELECT 1;", "SELECT 2;", "SELECT 3;"]

    def test_init_then_seed(self, make_script_dir):
        path = make_script_dir({"002_seed.sql": "INSERT;", "001_init.sql": "CREATE;"})
        assert [s.name for s in discover([DirectoryLocation(path)])] == ["001_init.sql", "002_seed.sql"]

    def test_duplicates_stay_adjacent_in_location_order(self, make_script_dir):
        first = make_script_dir({"001_x.sql": "-- first", "002_y.sql": ""}, name="first")
        second = make_script_dir({"001_x.sql": "-- second"}, name="second")

        scripts = discover([DirectoryLocation(first), DirectoryLocation(second)])

        assert [(s.name, s.body) for s in scripts] == [
            ("001_x.sql", "-- first"),
            ("001_x.sql", "-- second"),
            ("002_y.sql", ""),
        ]
        assert scripts[0].location == str(first)
        assert scripts[1].location == str(second)

    def test_prefix_and_suffix(self, make_script_dir):
        path = make_script_dir(
            {"V1_schema.sql": "", "V2_seed.sql": "", "R1_seed.sql": "", "V3_seed.txt": "", "README.md": ""}
        )
        scripts = discover([DirectoryLocation(path)], prefix="V", suffix="_seed")
        assert [s.name for s in scripts] == ["V2_seed.sql"]

    def test_includes_and_excludes(self, make_script_dir):
        path = make_script_dir({"a.sql": "", "b.sql": "", "c.sql": ""})
        location = DirectoryLocation(path)

        assert [s.name for s in discover([location], includes="a.sql,c.sql")] == ["a.sql", "c.sql"]
        assert [s.name for s in discover([location], excludes="b.sql")] == ["a.sql", "c.sql"]
        assert [s.name for s in discover([location], includes="a.sql,b.sql", excludes="b.sql")] == ["a.sql"]

    def test_exclude_name_with_spaces(self, make_script_dir):
        path = make_script_dir({"001 init.sql": "", "002_seed.sql": ""})
        assert [s.name for s in discover([DirectoryLocation(path)], excludes="001 init.sql")] == ["002_seed.sql"]

    def test_malformed_filter(self, make_script_dir):
        path = make_script_dir({"a.sql": ""})
        with pytest.raises(ConfigError):
            discover([DirectoryLocation(path)], includes="a.sql,,b.sql")

    def test_subdirectories_not_scanned(self, make_script_dir):
        path = make_script_dir({"001_top.sql": ""})
        nested = path / "nested.sql"
        nested.mkdir()
        (nested / "002_deep.sql").write_text("")
        assert [s.name for s in discover([DirectoryLocation(path)])] == ["001_top.sql"]

    def test_no_locations(self):
        assert discover([]) == []


class TestFailures:
    def test_missing_directory(self, tmp_path):
        with pytest.raises(ScriptPathError) as exc_info:
            discover([DirectoryLocation(tmp_path / "missing")])
        assert exc_info.value.context.location == str(tmp_path / "missing")

    def test_path_is_a_file(self, tmp_path):
        target = tmp_path / "file.sql"
        target.write_text("")
        with pytest.raises(ScriptPathError):
            discover([DirectoryLocation(target)])

    def test_undecodable_script_fails_whole_call(self, make_script_dir):
        path = make_script_dir({"001_ok.sql": "SELECT 1;", "002_bad.sql": b"\xff\xfe\xfa"})
        with pytest.raises(DiscoveryError) as exc_info:
            discover([DirectoryLocation(path)])
        assert exc_info.value.context.script == "002_bad.sql"

    def test_missing_package(self):
        with pytest.raises(DiscoveryError):
            discover([PackageLocation("commander_no_such_package")])


class TestPackageLocation:
    def test_bundled_package_has_no_scripts(self):
        assert discover([PackageLocation("commander.resources")]) == []

    def test_reads_package_resources(self, make_script_package):
        package = make_script_package({"001_init.sql": "CREATE TABLE t (id INTEGER);", "notes.txt": "x"})

        scripts = discover([PackageLocation(package)])

        assert [s.name for s in scripts] == ["001_init.sql"]
        assert scripts[0].location == f"package:{package}"
        assert scripts[0].body == "CREATE TABLE t (id INTEGER);"

    def test_package_before_directory_for_equal_names(self, make_script_package, make_script_dir):
        package = make_script_package({"001_init.sql": "-- bundled"})
        path = make_script_dir({"001_init.sql": "-- external"})

        scripts = discover([PackageLocation(package), DirectoryLocation(path)])

        assert [s.body for s in scripts] == ["-- bundled", "-- external"]


class TestScriptRepository:
    def test_from_settings(self, make_script_dir):
        path = make_script_dir({"V1.sql": "", "V2.sql": "", "X1.sql": ""})
        settings = ScriptSettings(path=path, prefix="V", excludes="V2.sql")

        repo = ScriptRepository.from_settings(settings)

        assert [loc.label for loc in repo.locations] == ["package:commander.resources", str(path)]
        assert [s.name for s in repo.discover()] == ["V1.sql"]

    def test_without_path_uses_only_package(self):
        repo = ScriptRepository.from_settings(ScriptSettings())
        assert len(repo.locations) == 1
        assert repo.discover() == []

    def test_discovery_is_repeatable(self, make_script_dir, make_script_package):
        package = make_script_package({"001_init.sql": "-- bundled", "010_more.sql": "-- more"})
        path = make_script_dir({"001_init.sql": "-- external", "005_seed.sql": "-- seed"})
        repo = ScriptRepository([PackageLocation(package), DirectoryLocation(path)], name_filter=NameFilter())

        first = [(s.name, s.location, s.body) for s in repo.discover()]
        second = [(s.name, s.location, s.body) for s in repo.discover()]

        assert first == second
        assert [name for name, _, _ in first] == ["001_init.sql", "001_init.sql", "005_seed.sql", "010_more.sql"]

    def test_does_not_cache(self, make_script_dir):
        path = make_script_dir({"001.sql": ""})
        repo = ScriptRepository([DirectoryLocation(path)], name_filter=NameFilter())
        assert len(repo.discover()) == 1
        (path / "002.sql").write_text("")
        assert len(repo.discover()) == 2
