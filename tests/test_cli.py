"""
Tests for CLI commands — package operations, status, compare, apply.
"""

import json
import logging
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from pkgconverge.adapters.mock import MockCommandRunner
from pkgconverge.main import cli

NAME = "ImageMagick-c++"
VERSION = "6.5.4.7-7.el6_5"
NOT_INSTALLED = f"package {NAME} is not installed"


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level, raise_exceptions = root.handlers[:], root.level, logging.raiseExceptions
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.raiseExceptions = raise_exceptions


@pytest.fixture
def mock_shell(monkeypatch, runner) -> MockCommandRunner:
    """Route every shell runner the CLI creates to the strict mock."""
    monkeypatch.setattr(
        "pkgconverge.adapters.shell.command.ShellCommandAdapter",
        lambda tool="rpm": runner,
    )
    return runner


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "ImageMagick-c++-6.5.4.7-7.el6_5.x86_64.rpm"
    path.write_bytes(b"")
    return path


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "pkgconverge" in result.output
        for command in ("install", "upgrade", "remove", "purge", "status", "compare", "apply"):
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestCompareCommand:
    @pytest.mark.parametrize(
        "a, b, symbol",
        [
            ("1.0-1", "1.0-2", "<"),
            ("1.10.1~alpha.0-1.el5", "1.10.1~alpha.0-1.el5", "="),
            ("21.4-19.el5", "6.5.4.7-7.el6_5", ">"),
        ],
    )
    def test_compare(self, a, b, symbol):
        result = CliRunner().invoke(cli, ["compare", a, b])
        assert result.exit_code == 0
        assert result.output.strip() == f"{a} {symbol} {b}"


class TestInstallCommand:
    def test_install(self, mock_shell, rpm_q, rpm_qp, artifact):
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), exit_code=1, output=NOT_INSTALLED)
        mock_shell.set_response(f"rpm  -i {artifact}")

        result = CliRunner().invoke(cli, ["install", NAME, "--source", str(artifact)])
        assert result.exit_code == 0, result.output
        assert "install" in result.output
        assert f"rpm  -i {artifact}" in result.output
        assert mock_shell.commands[-1] == f"rpm  -i {artifact}"

    def test_up_to_date(self, mock_shell, rpm_q, rpm_qp, artifact):
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), output=f"{NAME} {VERSION}")

        result = CliRunner().invoke(cli, ["install", NAME, "-s", str(artifact)])
        assert result.exit_code == 0
        assert "up to date" in result.output
        assert mock_shell.call_count == 2

    def test_json_output(self, mock_shell, rpm_q, rpm_qp, artifact):
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), output=f"{NAME} 6.5.4.7-5.el6_5")

        result = CliRunner().invoke(
            cli, ["install", NAME, "--source", str(artifact), "--dry-run", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["action"] == "upgrade"
        assert data["dry_run"] is True
        assert data["command"] == f"rpm  -U {artifact}"
        assert mock_shell.call_count == 2

    def test_downgrade_refused_exits_nonzero(self, mock_shell, rpm_q, rpm_qp, artifact):
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), output=f"{NAME} 21.4-19.el5")

        result = CliRunner().invoke(cli, ["install", NAME, "--source", str(artifact)])
        assert result.exit_code == 1
        assert "21.4-19.el5" in result.output

    def test_missing_source(self, mock_shell, tmp_path: Path):
        result = CliRunner().invoke(
            cli, ["install", NAME, "--source", str(tmp_path / "nope.rpm"), "--json"]
        )
        assert result.exit_code == 1
        assert "source_not_found" in result.output
        assert mock_shell.call_count == 0

    def test_options_and_tool(self, mock_shell, artifact):
        fmt = "'%{NAME} %{VERSION}-%{RELEASE}\n'"
        mock_shell.set_response(
            f"/opt/rpm -qp --queryformat {fmt} {artifact}", output=f"{NAME} {VERSION}"
        )
        mock_shell.set_response(
            f"/opt/rpm -q --queryformat {fmt} {NAME}", exit_code=1, output=NOT_INSTALLED
        )
        mock_shell.set_response(f"/opt/rpm --nodeps -i {artifact}")

        result = CliRunner().invoke(
            cli,
            ["install", NAME, "-s", str(artifact), "--options=--nodeps", "--tool", "/opt/rpm"],
        )
        assert result.exit_code == 0, result.output
        assert mock_shell.commands[-1] == f"/opt/rpm --nodeps -i {artifact}"


    def test_unbalanced_options_fail_cleanly(self, mock_shell, artifact):
        result = CliRunner().invoke(
            cli, ["install", NAME, "-s", str(artifact), "--options=--define 'x"]
        )
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "cannot be split" in result.output
        assert mock_shell.call_count == 0


class TestRemoveCommand:
    @pytest.mark.parametrize("command", ["remove", "purge"])
    def test_remove(self, mock_shell, rpm_q, command):
        mock_shell.set_response(rpm_q(NAME), output=f"{NAME} {VERSION}")
        mock_shell.set_response(f"rpm  -e {NAME}-{VERSION}")

        result = CliRunner().invoke(cli, [command, NAME])
        assert result.exit_code == 0, result.output
        assert f"rpm  -e {NAME}-{VERSION}" in result.output


class TestStatusCommand:
    def test_installed(self, mock_shell, rpm_q):
        mock_shell.set_response(rpm_q(NAME), output=f"{NAME} {VERSION}")
        result = CliRunner().invoke(cli, ["status", NAME])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_json(self, mock_shell, rpm_q, rpm_qp, artifact):
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), exit_code=1, output=NOT_INSTALLED)
        result = CliRunner().invoke(cli, ["status", NAME, "-s", str(artifact), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["installed"]["status"] == "absent"
        assert data["candidate"]["version"] == VERSION

    def test_unsupported_scheme(self, mock_shell):
        result = CliRunner().invoke(cli, ["status", NAME, "-s", "foobar://x/y.rpm"])
        assert result.exit_code == 1
        assert "unsupported URI scheme" in result.output


class TestApplyCommand:
    def _make_manifest(self, tmp_path: Path, artifact: Path) -> Path:
        content = textwrap.dedent(f"""\
            packages:
              - name: {NAME}
                source: {artifact}
              - name: openssh-askpass
                action: remove
        """)
        config = tmp_path / "packages.yml"
        config.write_text(content)
        return config

    def test_apply(self, mock_shell, rpm_q, rpm_qp, artifact, tmp_path: Path):
        config = self._make_manifest(tmp_path, artifact)
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), exit_code=1, output=NOT_INSTALLED)
        mock_shell.set_response(f"rpm  -i {artifact}")
        mock_shell.set_response(
            rpm_q("openssh-askpass"),
            exit_code=1,
            output="package openssh-askpass is not installed",
        )

        result = CliRunner().invoke(cli, ["--config", str(config), "apply"])
        assert result.exit_code == 0, result.output
        assert "Result: 2/2 converged, 1 changed" in result.output

    def test_partial_failure(self, mock_shell, rpm_q, rpm_qp, artifact, tmp_path: Path):
        config = self._make_manifest(tmp_path, artifact)
        mock_shell.set_response(rpm_qp(str(artifact)), output=f"{NAME} {VERSION}")
        mock_shell.set_response(rpm_q(NAME), exit_code=-1)
        mock_shell.set_response(
            rpm_q("openssh-askpass"),
            exit_code=1,
            output="package openssh-askpass is not installed",
        )

        result = CliRunner().invoke(cli, ["-q", "--config", str(config), "apply", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["status"] == "partial"
        assert data["packages"][0]["reason"] == "unable_to_determine_version"
        assert data["packages"][1]["ok"] is True

    def test_missing_manifest(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "apply"])
        assert result.exit_code == 1
        assert "not found" in result.output
