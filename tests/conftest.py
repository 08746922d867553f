"""Shared pytest configuration and fixtures for the FOV survey test suite."""

import os
import sys
from pathlib import Path

import pytest

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6 import QtWidgets  # noqa: E402

# Ensure the python/ directory is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
PYTHON_PATH = PROJECT_ROOT / "python"
if str(PYTHON_PATH) not in sys.path:
    sys.path.insert(0, str(PYTHON_PATH))


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def qt_application():
    """Provide the Qt application object needed by QObject and widget classes."""
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT
