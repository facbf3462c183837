import pytest

from korean_barista.services.store_service import UserStore


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "user-storage.json")


@pytest.fixture
def store(store_path):
    return UserStore(store_path)
