"""
Tests for brand kit persistence.

Covers:
- JSON file repository round trip, not-found, unreadable data
- Malformed records dropped with the rest kept
- RepositoryGateway: timeouts and failures degrade to the fallback config
"""
import asyncio
import json
import time

import pytest

from models.brand_kit import BrandKitConfig
from services.brand_kit_repository import (
    BrandKitRepository, InMemoryBrandKitRepository, JsonFileBrandKitRepository,
    RepositoryGateway, parse_brand_kit,
)
from utils.errors import PersistenceError

from conftest import make_element


@pytest.fixture
def config():
    return BrandKitConfig([
        make_element("logo", "https://cdn.example.com/logo.png", x=100, y=80, scale=0.4),
        make_element("wm", "https://cdn.example.com/wm.png", rotation=300, opacity=0.5),
    ])


class TestJsonFileRepository:

    def test_round_trip(self, tmp_path, config):
        repo = JsonFileBrandKitRepository(tmp_path)
        repo.save("alice", config)
        loaded = repo.load("alice")
        assert loaded == config
        assert loaded.ids == ["logo", "wm"]

    def test_file_is_record_array(self, tmp_path, config):
        repo = JsonFileBrandKitRepository(tmp_path)
        repo.save("alice", config)
        with open(repo.path_for("alice"), encoding='utf-8') as f:
            records = json.load(f)
        assert records[1]['rotationDeg'] == 300
        assert records[0]['sourceUrl'] == "https://cdn.example.com/logo.png"
        assert list(tmp_path.glob("*.tmp")) == []

    def test_not_found(self, tmp_path):
        assert JsonFileBrandKitRepository(tmp_path).load("nobody") is None

    def test_user_id_sanitized(self, tmp_path):
        path = JsonFileBrandKitRepository(tmp_path).path_for("../evil user")
        assert path.parent == tmp_path

    def test_corrupt_file(self, tmp_path):
        repo = JsonFileBrandKitRepository(tmp_path)
        repo.path_for("bob").write_text("{not json", encoding='utf-8')
        with pytest.raises(PersistenceError):
            repo.load("bob")

    def test_file_not_utf8(self, tmp_path):
        repo = JsonFileBrandKitRepository(tmp_path)
        repo.path_for("bob").write_bytes(b"\xff\xfe[]")
        with pytest.raises(PersistenceError):
            repo.load("bob")

    def test_wrong_shape(self, tmp_path):
        repo = JsonFileBrandKitRepository(tmp_path)
        repo.path_for("bob").write_text('{"elements": []}', encoding='utf-8')
        with pytest.raises(PersistenceError):
            repo.load("bob")

    def test_malformed_records_dropped(self, tmp_path, config):
        repo = JsonFileBrandKitRepository(tmp_path)
        records = config.to_records()
        records.insert(1, {'id': 'bad', 'type': 'logo'})
        repo.path_for("carol").write_text(json.dumps(records), encoding='utf-8')
        assert repo.load("carol").ids == ["logo", "wm"]


def test_in_memory_repository_stores_copies(config):
    repo = InMemoryBrandKitRepository()
    assert repo.load("dave") is None
    repo.save("dave", config)
    config.get("logo").set_position(0, 0)
    assert repo.load("dave").get("logo").position.x == 100


def test_parse_brand_kit_rejects_non_list():
    with pytest.raises(PersistenceError):
        parse_brand_kit("logo")


class SlowRepository(BrandKitRepository):
    def __init__(self, delay):
        self.delay = delay

    def load(self, user_id):
        time.sleep(self.delay)
        return BrandKitConfig()

    def save(self, user_id, config):
        time.sleep(self.delay)


class BrokenRepository(BrandKitRepository):
    def load(self, user_id):
        raise PersistenceError("disk on fire")

    def save(self, user_id, config):
        raise PersistenceError("disk on fire")


class TestRepositoryGateway:

    def test_load_success(self, config):
        repo = InMemoryBrandKitRepository()
        repo.save("erin", config)
        ok, loaded = asyncio.run(RepositoryGateway(repo).load("erin"))
        assert ok
        assert loaded == config

    def test_load_not_found_is_ok(self):
        ok, loaded = asyncio.run(RepositoryGateway(InMemoryBrandKitRepository()).load("nobody"))
        assert ok
        assert loaded is None

    def test_failure_keeps_fallback(self, config):
        ok, loaded = asyncio.run(RepositoryGateway(BrokenRepository()).load("erin", fallback=config))
        assert not ok
        assert loaded is config

    def test_timeout_keeps_fallback(self, config):
        gateway = RepositoryGateway(SlowRepository(3.0), timeout=0.05)
        started = time.monotonic()
        ok, loaded = asyncio.run(gateway.load("erin", fallback=config))
        # The hung call is abandoned, not joined when the loop shuts down
        assert time.monotonic() - started < 1.5
        assert not ok
        assert loaded is config

    def test_save_failure_and_timeout_return_false(self, config):
        assert not asyncio.run(RepositoryGateway(BrokenRepository()).save("erin", config))
        assert not asyncio.run(RepositoryGateway(SlowRepository(0.5), timeout=0.05).save("erin", config))

    def test_save_success(self, tmp_path, config):
        repo = JsonFileBrandKitRepository(tmp_path)
        assert asyncio.run(RepositoryGateway(repo).save("frank", config))
        assert repo.load("frank") == config

    def test_undecodable_file_keeps_fallback(self, tmp_path, config):
        repo = JsonFileBrandKitRepository(tmp_path)
        repo.path_for("gina").write_bytes(b"\xff\xfe[]")
        ok, loaded = asyncio.run(RepositoryGateway(repo).load("gina", fallback=config))
        assert not ok
        assert loaded is config
