from pathlib import Path

import pytest
from PIL import Image

from quickreports.db import open_engine
from quickreports.repository import IncidentRepository
from quickreports.schema import ensure_schema


def _make_image(color=(255, 0, 0), size=(4, 3)) -> Image.Image:
    return Image.new("RGB", size, color)


@pytest.fixture
def make_image():
    return _make_image


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "incidents.db"


@pytest.fixture
def engine(db_path: Path):
    eng = open_engine(db_path, echo=False)
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine) -> IncidentRepository:
    return IncidentRepository(engine)
