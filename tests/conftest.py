import pytest
from fastapi.testclient import TestClient

from sous_chef.main import create_app


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    # isolate data dir for this test run
    d = tmp_path / "data"
    d.mkdir()
    monkeypatch.setenv("DATA_DIR", str(d))
    for var in ("INVENTORY_FILE", "RECIPES_FILE", "SHOPPING_LIST_FILE", "EVENTS_FILE", "METRICS_FILE"):
        monkeypatch.delenv(var, raising=False)
    return d


@pytest.fixture()
def client(data_dir):
    with TestClient(create_app()) as c:
        yield c
