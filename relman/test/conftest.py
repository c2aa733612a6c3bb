from __future__ import annotations

import pytest

from relman.output.console import MockConsole
from relman.test._fakes import FakeRunner


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()
