"""
Tests for the mutating-command executor.
"""

import pytest

from pkgconverge.core.domain.commands import build_command
from pkgconverge.core.engine.executor import execute_command
from pkgconverge.core.errors import EXEC_ERROR, PackageError
from pkgconverge.core.models.package import PackageAction, PackageSpec

REF = "/tmp/ImageMagick-c++-6.5.4.7-7.el6_5.x86_64.rpm"
INSTALL = f"rpm  -i {REF}"


@pytest.fixture
def command():
    return build_command(PackageAction.install(REF), PackageSpec(name="ImageMagick-c++", source=REF))


class TestExecuteCommand:
    def test_success(self, runner, command):
        runner.set_response(INSTALL, output="Preparing...")
        receipt = execute_command(command, runner)
        assert receipt.ok
        assert runner.commands == [INSTALL]

    def test_failure_carries_output(self, runner, command):
        runner.set_response(
            INSTALL,
            exit_code=1,
            output="error: Failed dependencies:\n\tlibMagickCore.so.5 is needed",
        )
        with pytest.raises(PackageError) as exc:
            execute_command(command, runner)
        assert exc.value.reason == EXEC_ERROR
        assert "exit code 1" in exc.value.message
        assert INSTALL in exc.value.message
        assert "libMagickCore.so.5 is needed" in exc.value.output

    def test_timeout(self, runner, command):
        runner.set_timeout(INSTALL)
        with pytest.raises(PackageError) as exc:
            execute_command(command, runner)
        assert exc.value.reason == EXEC_ERROR
        assert "timed out" in exc.value.message

    def test_dry_run_never_executes(self, runner, command):
        receipt = execute_command(command, runner, dry_run=True)
        assert receipt.status == "skipped"
        assert runner.call_count == 0
        assert "[dry-run]" in receipt.output

    def test_runs_exactly_once(self, runner, command):
        runner.set_response(INSTALL)
        execute_command(command, runner)
        assert runner.call_count == 1
