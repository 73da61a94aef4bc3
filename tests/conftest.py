"""
Pytest configuration for tracelang tests.
"""
import io
import os
import sys

import pytest

# Ensure `import tracelang...` works without installing the package.
_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
_SRC_DIR = os.path.join(_ROOT, 'src')

if _SRC_DIR not in sys.path:
    sys.path.insert(0, _SRC_DIR)

from tracelang.config import TraceLangConfig
from tracelang.evaluator import Interpreter


@pytest.fixture
def interp():
    """Interpreter with default settings and captured output."""
    return Interpreter(TraceLangConfig(), stdout=io.StringIO())


@pytest.fixture
def run(interp):
    def _run(source):
        interp.execute_source(source)
        return interp
    return _run
