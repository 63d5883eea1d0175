"""
Global pytest configuration for the random-employee service.

This file provides shared fixtures and enforces Python version requirements.
"""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path

import pytest

from random_employee.api.employees import EmployeeStore
from random_employee.api.server import create_app
from random_employee.config import ENV_PREFIX, Settings
from random_employee.shutdown import ShutdownCoordinator

_MIN_PY_VERSION = (3, 11)


def _verify_python_version() -> str:
    """Return the interpreter version string or exit if <3.11."""
    version_info = sys.version_info
    version_str = ".".join(map(str, version_info[:3]))
    if version_info < _MIN_PY_VERSION:
        pytest.exit(
            f"ERROR: pytest must run on Python 3.11+ (detected {version_str}).",
            returncode=1,
        )
    return version_str


def pytest_report_header(config: pytest.Config) -> str:
    version_str = _verify_python_version()
    return f"Python interpreter verified for pytest: {version_str}"


@pytest.fixture(scope="session", autouse=True)
def register_markers(pytestconfig: pytest.Config) -> None:
    """Register project markers to prevent unknown marker warnings."""
    markers = {
        "unit": "Unit tests that should execute quickly.",
        "integration": "Integration tests binding real sockets.",
        "slow": "Slow or high-cost tests.",
    }
    for name, description in markers.items():
        pytestconfig.addinivalue_line("markers", f"{name}: {description}")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Strip service env vars and run from an empty directory."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def free_port() -> int:
    """Return a port that was free a moment ago on 127.0.0.1."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def readiness_path(tmp_path: Path) -> Path:
    return tmp_path / "service-ready"


@pytest.fixture
def settings(free_port: int, readiness_path: Path) -> Settings:
    return Settings(
        startup_delay_ms=0,
        listen_host="127.0.0.1",
        listen_port=free_port,
        readiness_file=readiness_path,
        log_format="console",
    )


@pytest.fixture
def coordinator() -> ShutdownCoordinator:
    return ShutdownCoordinator()


@pytest.fixture
def store() -> EmployeeStore:
    return EmployeeStore()


@pytest.fixture
def app(settings: Settings, coordinator: ShutdownCoordinator, store: EmployeeStore):
    return create_app(settings, coordinator, store)
