"""
Shared test fixtures and configuration.
"""

from collections.abc import Callable

import pytest

from pkgconverge.adapters.mock import MockCommandRunner

QUERY_FORMAT = "%{NAME} %{VERSION}-%{RELEASE}\n"


@pytest.fixture
def runner() -> MockCommandRunner:
    """A strict mock runner: unscripted commands fail with no exit code."""
    return MockCommandRunner(strict=True)


@pytest.fixture
def rpm_qp() -> Callable[[str], str]:
    """Exact candidate-query command line for an artifact."""
    return lambda ref: f"rpm -qp --queryformat '{QUERY_FORMAT}' {ref}"


@pytest.fixture
def rpm_q() -> Callable[[str], str]:
    """Exact installed-query command line for a package name."""
    return lambda name: f"rpm -q --queryformat '{QUERY_FORMAT}' {name}"
