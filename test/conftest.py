"""
Test configuration for Monkey interpreter tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter


@pytest.fixture
def output():
  """In-memory sink standing in for stdout"""
  return io.StringIO()


@pytest.fixture
def interpreter(output):
  """Fresh interpreter writing to the in-memory sink"""
  return create_interpreter(output=output)


@pytest.fixture
def examples_dir():
  return project_root / "examples"
