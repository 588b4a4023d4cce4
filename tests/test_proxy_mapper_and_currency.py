import json

import pytest

from poemodel import currency
from poemodel.currency import DEFAULT_GCP_RATIOS, configured_ratios, get_total_gcp, load_ratios
from poemodel.items import get_item
from poemodel.models import OrbType
from poemodel.proxy_mapper import get_characters, get_stash_proxy, get_tabs


class TestProxyMapper:
    def test_get_tabs_maps_short_keys(self):
        tabs = get_tabs([{"i": 3, "n": "Dump", "src": "/tab.png", "colour": {"r": 1}}])
        assert len(tabs) == 1
        assert (tabs[0].i, tabs[0].name, tabs[0].src) == (3, "Dump", "/tab.png")

    def test_get_tabs_tolerates_garbage(self):
        assert get_tabs(None) == []
        assert get_tabs(["x", {"i": 1}])[0].name == ""

    def test_null_items_keeps_tab_count_but_not_tabs(self):
        proxy = get_stash_proxy({"items": None, "numTabs": 4, "tabs": [{"i": 0, "n": "1"}]})
        assert proxy.items is None
        assert proxy.num_tabs == 4
        assert proxy.tabs == []

    def test_empty_document_has_no_items(self):
        assert get_stash_proxy({}).items is None

    def test_items_and_tab_count(self, make_item):
        proxy = get_stash_proxy({"items": [make_item()], "numTabs": 7, "tabs": []})
        assert len(proxy.items) == 1
        assert proxy.num_tabs == 7

    def test_characters(self):
        chars = get_characters([
            {"name": "Zed", "league": "Hardcore", "class": "Witch", "classId": 3, "level": 71},
            "junk",
        ])
        assert len(chars) == 1
        assert chars[0].name == "Zed"
        assert chars[0].class_name == "Witch"
        assert chars[0].level == 71


class TestCurrencyRatios:
    def test_defaults_without_file(self):
        assert load_ratios("") == DEFAULT_GCP_RATIOS

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_ratios(str(tmp_path / "nope.json")) == DEFAULT_GCP_RATIOS

    def test_overrides_from_file(self, tmp_path):
        path = tmp_path / "ratios.json"
        path.write_text(json.dumps({"Chaos Orb": 1.25, "Not An Orb": 9, "Exalted Orb": "lots"}), encoding="utf-8")
        ratios = load_ratios(str(path))
        assert ratios[OrbType.CHAOS_ORB] == 1.25
        assert ratios[OrbType.EXALTED_ORB] == DEFAULT_GCP_RATIOS[OrbType.EXALTED_ORB]

    def test_corrupt_file_uses_defaults(self, tmp_path, caplog):
        path = tmp_path / "ratios.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_ratios(str(path)) == DEFAULT_GCP_RATIOS
        assert "Failed to load currency ratios file" in caplog.text

    def test_configured_ratios_read_once(self, monkeypatch):
        calls = []

        def counting_load(path):
            calls.append(path)
            return dict(DEFAULT_GCP_RATIOS)

        monkeypatch.setattr(currency, "_configured_ratios", None)
        monkeypatch.setattr(currency, "load_ratios", counting_load)

        first = configured_ratios()
        assert configured_ratios() is first
        assert len(calls) == 1

    def test_unknown_orbs_are_worth_nothing(self, make_item):
        currencies = [
            get_item(make_item(frameType=5, typeLine="Mystery Coin", stackSize=50)),
            get_item(make_item(frameType=5, typeLine="Exalted Orb", stackSize=2)),
        ]
        assert get_total_gcp(currencies, DEFAULT_GCP_RATIOS) == pytest.approx(40.0)
