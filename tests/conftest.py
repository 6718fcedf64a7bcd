from __future__ import annotations

import sys
from pathlib import Path

# Allow importing the package when running plain `pytest` without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

import pytest

from mython import Interpreter
from mython.runtime import DummyContext


@pytest.fixture
def run_mython():
    def _run(source: str, *, closure=None, filename: str = "<test>") -> str:
        interpreter = Interpreter()
        result = interpreter.run(source, closure=closure, filename=filename)
        result.raise_for_exception()
        return result.output

    return _run


@pytest.fixture
def context():
    return DummyContext()
