import sys
import time
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from shelter.context import AppContext, set_context
from shelter.domain.models import AdoptionRequest, Animal, AnimalStatus, RequestStatus
from shelter.security import PasswordHasher


@pytest.fixture()
def tmp_paths(tmp_path, monkeypatch):
    paths = {
        "db": str(tmp_path / "shelter_test.db"),
        "auth": str(tmp_path / "auth_test.db"),
        "files": str(tmp_path / "files"),
    }
    # Point configuration at the temp locations too
    monkeypatch.setenv("SHELTER_DB_PATH", paths["db"])
    monkeypatch.setenv("SHELTER_AUTH_DB_PATH", paths["auth"])
    monkeypatch.setenv("SHELTER_FILES_ROOT", paths["files"])
    return paths


@pytest.fixture()
def ctx(tmp_paths):
    # Minimum bcrypt cost keeps the suite fast
    c = AppContext(tmp_paths["db"], tmp_paths["auth"], tmp_paths["files"], hasher=PasswordHasher(rounds=4))
    set_context(c)
    yield c
    set_context(None)


@pytest.fixture()
def store(ctx):
    return ctx.records


@pytest.fixture()
def credentials(ctx):
    return ctx.credentials


@pytest.fixture()
def client(ctx):
    from shelter.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture()
def make_animal():
    def _make(id: str = "", **overrides) -> Animal:
        fields = dict(
            id=id,
            name="Buddy",
            specie="dog",
            breed="golden retriever",
            sex="male",
            birth_month=6,
            birth_year=2020,
            neutered=True,
            admission_timestamp=int(time.time()),
            status=AnimalStatus.AVAILABLE,
            image_path="/test/images/buddy.jpg",
            appearance="Golden coat with friendly eyes",
            bio="Loves playing fetch.",
        )
        fields.update(overrides)
        return Animal(**fields)
    return _make


@pytest.fixture()
def make_request():
    def _make(animal_id: str, id: str = "", **overrides) -> AdoptionRequest:
        fields = dict(
            id=id,
            animal_id=animal_id,
            username="jira",
            name="Jira P.",
            email="jira@example.com",
            tel_number="0812345678",
            address="1 Main Road",
            occupation="Engineer",
            annual_income="50000",
            num_people=2,
            num_children=0,
            request_timestamp=int(time.time()),
            adoption_timestamp=0,
            status=RequestStatus.PENDING,
            country="Thailand",
        )
        fields.update(overrides)
        return AdoptionRequest(**fields)
    return _make
