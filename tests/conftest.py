import os

# keep test runs from writing logs/customerbook.log into the working tree
os.environ.setdefault("LOG_FILE", "")

import pytest
from fastapi.testclient import TestClient

from customerbook.api.main import create_app
from customerbook.config import Settings
from customerbook.db.session import Database
from customerbook.services.customers_service import CustomerStore


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        log_file=None,
        log_level="WARNING",
        recent_limit=10,
    )


@pytest.fixture()
def database(settings):
    db = Database.from_settings(settings).open()
    db.create_all()
    yield db
    db.close()


@pytest.fixture()
def store(database):
    return CustomerStore(database)


@pytest.fixture()
def client(settings, database):
    app = create_app(settings, database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_customer(store):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "name": f"Customer {n}",
            "email": f"customer{n}@example.com",
            "phone": f"555-01{n:02d}",
            "address": f"{n} Main St",
        }
        data.update(overrides)
        return store.create(data)

    return _make
