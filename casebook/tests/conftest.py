"""
Shared fixtures: the sample case shipped in data/.
"""

from pathlib import Path

import pytest

from casebook.config import Settings
from casebook.data.loader import CaseRepository, parse_case_bundle, read_json
from casebook.engine.session import GameSession

DATA_DIR = Path(__file__).resolve().parents[2] / "data"


@pytest.fixture(scope="session")
def bundle():
    return parse_case_bundle(
        read_json(DATA_DIR / "locations.json"),
        read_json(DATA_DIR / "caseIntro.json"),
    )


@pytest.fixture
def repository(bundle):
    return CaseRepository.from_bundle(bundle)


@pytest.fixture
def game_settings():
    return Settings(_env_file=None)


@pytest.fixture
def session(repository, game_settings):
    return GameSession(repository, game_settings, session_id="test-session")
