import json
import os
import sys
from pathlib import Path

import pytest

# Keep test runs from writing log files or sleeping between requests
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_TO_STDOUT", "false")
os.environ.setdefault("REQUEST_MIN_SPACING", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def item_descriptor(**overrides):
    descriptor = {
        "w": 1,
        "h": 1,
        "name": "",
        "typeLine": "Iron Ring",
        "inventoryId": "Stash1",
        "frameType": 0,
        "icon": "https://web.poecdn.com/image/Art/iron_ring.png",
        "league": "Standard",
        "x": 0,
        "y": 0,
        "identified": True,
    }
    descriptor.update(overrides)
    return descriptor


def stash_document(items, num_tabs=1, tabs=None):
    if tabs is None:
        tabs = [{"i": i, "n": str(i + 1), "src": f"/tab/{i}.png"} for i in range(num_tabs)]
    return json.dumps({"items": items, "numTabs": num_tabs, "tabs": tabs}).encode("utf-8")


class FakeTransport:
    def __init__(
        self,
        stash_docs=None,
        characters=b"[]",
        inventories=None,
        auth_result=True,
        auth_error=None,
    ):
        self.stash_docs = stash_docs or {}
        self.characters = characters
        self.inventories = inventories or {}
        self.auth_result = auth_result
        self.auth_error = auth_error
        self.calls = []

    def authenticate(self, identity, password):
        self.calls.append(("authenticate", identity, password))
        if self.auth_error is not None:
            raise self.auth_error
        return self.auth_result

    def get_stash(self, index, league, force_refresh):
        self.calls.append(("get_stash", index, league, force_refresh))
        doc = self.stash_docs[index]
        if isinstance(doc, Exception):
            raise doc
        return doc

    def get_characters(self):
        self.calls.append(("get_characters",))
        return self.characters

    def get_inventory(self, character_name):
        self.calls.append(("get_inventory", character_name))
        return self.inventories[character_name]

    def get_image(self, url):
        self.calls.append(("get_image", url))
        return b"img:" + url.encode("utf-8")


class FakeCache:
    def __init__(self, identity):
        self.identity = identity
        self.cleared = 0

    def clear(self):
        self.cleared += 1


@pytest.fixture
def make_item():
    return item_descriptor


@pytest.fixture
def make_stash_doc():
    return stash_document


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def model_factory():
    """Build a POEModel wired to the given FakeTransport and a FakeCache."""
    from poemodel.model import POEModel

    def build(transport):
        caches = []

        def cache_factory(identity):
            cache = FakeCache(identity)
            caches.append(cache)
            return cache

        model = POEModel(
            transport_factory=lambda identity, cache, offline: transport,
            cache_factory=cache_factory,
        )
        model.created_caches = caches
        return model

    return build
