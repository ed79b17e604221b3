"""
Tests for the featureflags command line tool.
"""

import json
import logging

import pytest

from featureflags.cli import build_parser, main, run_command


@pytest.fixture(autouse=True)
def restore_root_logging(isolated_config):
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def db_args(tmp_path):
    return ["--database-url", f"sqlite:///{tmp_path / 'flags.db'}"]


def run(db_args, *argv):
    return main(db_args + list(argv))


class TestParser:
    """Tests for argument parsing."""

    def test_scope_defaults_to_global(self):
        args = build_parser().parse_args(["enable", "dark_mode"])
        assert args.scope == "global"
        assert args.value is None

    def test_copy_arguments(self):
        args = build_parser().parse_args(["copy", "global", "beta", "--overwrite"])
        assert (args.from_scope, args.to_scope, args.overwrite) == ("global", "beta", True)

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args([])
        assert exc.value.code == 2

    def test_unknown_command_is_usage_error(self, db_args):
        with pytest.raises(SystemExit) as exc:
            run(db_args, "frobnicate")
        assert exc.value.code == 2


class TestCommands:
    """End-to-end commands against a sqlite file."""

    def test_enable_then_check(self, db_args, capsys):
        assert run(db_args, "enable", "dark_mode") == 0
        assert "enabled for scope 'global'" in capsys.readouterr().out

        assert run(db_args, "check", "dark_mode", "--scope", "beta") == 0
        assert "dark_mode [beta]" in capsys.readouterr().out

    def test_check_disabled_exits_three(self, db_args):
        assert run(db_args, "check", "nothing") == 3

    def test_disable_overrides_global(self, db_args):
        run(db_args, "enable", "dark_mode")
        assert run(db_args, "disable", "dark_mode", "--scope", "beta") == 0

        assert run(db_args, "check", "dark_mode", "--scope", "beta") == 3
        assert run(db_args, "check", "dark_mode") == 0

    def test_enable_with_json_value(self, db_args, capsys):
        run(db_args, "enable", "api_limit", "--scope", "plan:pro", "--value", '{"limit": 1000}')
        capsys.readouterr()

        run(db_args, "list", "--scope", "plan:pro", "--json")
        records = json.loads(capsys.readouterr().out)
        assert records[0]["name"] == "api_limit"
        assert records[0]["value"] == {"limit": 1000}

    def test_enable_with_plain_text_value(self, db_args, capsys):
        run(db_args, "enable", "theme", "--value", "blue")
        capsys.readouterr()

        run(db_args, "check", "theme")
        assert 'value="blue"' in capsys.readouterr().out

    def test_list_table(self, db_args, capsys):
        run(db_args, "enable", "zeta")
        run(db_args, "disable", "alpha")
        capsys.readouterr()

        assert run(db_args, "list") == 0
        out = capsys.readouterr().out
        assert "Feature flags for scope: global" in out
        assert out.index("alpha") < out.index("zeta")

    def test_list_empty(self, db_args, capsys):
        assert run(db_args, "list", "--scope", "beta") == 0
        assert "No feature flags found for scope 'beta'" in capsys.readouterr().out

    def test_remove(self, db_args, capsys):
        run(db_args, "enable", "dark_mode", "--scope", "beta")
        capsys.readouterr()

        assert run(db_args, "remove", "dark_mode", "--scope", "beta") == 0
        assert "removed" in capsys.readouterr().out

        assert run(db_args, "remove", "dark_mode", "--scope", "beta") == 0
        assert "No record" in capsys.readouterr().out

    def test_copy(self, db_args, capsys):
        run(db_args, "enable", "feature_a")
        run(db_args, "enable", "feature_b")
        capsys.readouterr()

        assert run(db_args, "copy", "global", "beta") == 0
        assert "Copied 2 feature(s)" in capsys.readouterr().out

        assert run(db_args, "copy", "global", "beta") == 0
        assert "Copied 0 feature(s)" in capsys.readouterr().out

    def test_non_finite_value_stored_as_text(self, db_args, capsys):
        assert run(db_args, "enable", "ratio", "--value", "NaN") == 0
        capsys.readouterr()

        run(db_args, "list", "--json")
        records = json.loads(capsys.readouterr().out)
        assert records[0]["value"] == "NaN"


class TestErrors:
    """Errors exit with status 1 and a message on stderr."""

    def test_invalid_name(self, db_args, capsys):
        assert run(db_args, "enable", "x" * 101) == 1
        assert "Error:" in capsys.readouterr().err

    def test_unreachable_database(self, tmp_path, capsys):
        url = f"sqlite:///{tmp_path / 'missing' / 'flags.db'}"
        assert main(["--database-url", url, "list"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_check_outage_is_not_reported_as_disabled(self, tmp_path, capsys):
        url = f"sqlite:///{tmp_path / 'missing' / 'flags.db'}"
        assert main(["--database-url", url, "check", "dark_mode"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.yaml"), "list"]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_config_file_database(self, tmp_path, capsys):
        config_file = tmp_path / "flags.yaml"
        config_file.write_text(f"database:\n  url: sqlite:///{tmp_path / 'from_config.db'}\n")

        assert main(["--config", str(config_file), "enable", "dark_mode"]) == 0
        assert (tmp_path / "from_config.db").exists()


class TestRunCommand:
    """run_command against an in-process service."""

    def test_check_logs_with_command_context(self, service, caplog, capsys):
        service.enable("dark_mode")
        args = build_parser().parse_args(["check", "dark_mode", "--scope", "beta"])

        with caplog.at_level(logging.DEBUG, logger="featureflags.cli"):
            assert run_command(args, service) == 0

        record = next(r for r in caplog.records if r.name == "featureflags.cli")
        assert record.extra_data == {"command": "check"}
        assert "'dark_mode'" in record.getMessage()

    def test_check_disabled_uses_distinct_code(self, service, capsys):
        args = build_parser().parse_args(["check", "dark_mode"])
        assert run_command(args, service) == 3
