"""
Pytest configuration and shared fixtures for the graftconf test suite.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
# sample_models is imported by name, including through "module:Class" targets
sys.path.insert(0, str(Path(__file__).parent))

RESOURCES = Path(__file__).parent / "resources"


@pytest.fixture
def resources_dir():
    """Directory holding the JSON documents used by the tests."""
    return RESOURCES


@pytest.fixture
def top_level():
    """A TopLevel with its NextLevel already in place."""
    from sample_models import TopLevel
    return TopLevel()


@pytest.fixture
def other():
    from sample_models import Other
    return Other()


@pytest.fixture
def binding_logger():
    """A fresh in-memory binding logger."""
    from graftconf.infrastructure.logger import BindingLogger
    return BindingLogger()
