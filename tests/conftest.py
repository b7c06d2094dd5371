import pytest

from weekly_tracker.programs.config import ProgramConfigProvider

from .sheet_data import build_store


@pytest.fixture
def store():
    return build_store()


@pytest.fixture
def config(store):
    return ProgramConfigProvider(store).load()
