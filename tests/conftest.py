"""
Test Configuration File

Unified setup for Python path, avoiding sys.path.insert in each test file.
Provides the QCoreApplication fixture required by the Qt-based tests.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture(scope="session")
def qapp():
    """
    Create QCoreApplication for all tests.

    Uses session scope to avoid creating multiple application instances.
    """
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def _reset_config_service():
    """Keep the ConfigService singleton from leaking between tests."""
    from services.config_service import ConfigService

    ConfigService.reset_instance()
    yield
    ConfigService.reset_instance()


@pytest.fixture
def sandbox_config_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the per-user config directory into tmp_path."""
    base = tmp_path / "user-config"
    # Set for Windows/Mac/Linux to avoid platform differences leaking to real user directories
    monkeypatch.setenv("APPDATA", str(base))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base))
    return base
