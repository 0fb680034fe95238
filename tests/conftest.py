from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from buildsniff.core.config import settings
from buildsniff.core.containers import build_artifact_service
from buildsniff.main import app

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _use_tmp_dir(tmp_path, monkeypatch):
    """Keep transient artifact files inside the test's temp directory."""
    tmp = tmp_path / "scratch"
    tmp.mkdir()
    monkeypatch.setattr(settings, "TMP_DIR", str(tmp))


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def service():
    return build_artifact_service()


@pytest.fixture
def fixture_path():
    def _path(name: str) -> Path:
        return FIXTURES / name

    return _path


@pytest.fixture
def fixture_text():
    def _read(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")

    return _read
