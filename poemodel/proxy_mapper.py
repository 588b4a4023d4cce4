# poemodel/proxy_mapper.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .items import as_int, as_str, get_items
from .models import Character, Item, Tab

STASH = "Stash"


def inventory_id(tab_index: int) -> str:
    """Inventory id carried by items stored in the 0-based stash tab `tab_index`."""
    return f"{STASH}{tab_index + 1}"


@dataclass
class StashProxy:
    """
    Stash-shaped view of one raw stash document. `items` is None when the
    document carried no item list at all.
    """
    items: Optional[List[Item]]
    num_tabs: int = 0
    tabs: List[Tab] = field(default_factory=list)


def get_tab(raw: Dict[str, Any]) -> Tab:
    return Tab(i=as_int(raw.get("i")), name=as_str(raw.get("n")), src=as_str(raw.get("src")))


def get_tabs(raw_tabs: Any) -> List[Tab]:
    if not isinstance(raw_tabs, list):
        return []
    return [get_tab(t) for t in raw_tabs if isinstance(t, dict)]


def get_stash_proxy(document: Dict[str, Any]) -> StashProxy:
    raw_items = document.get("items")
    num_tabs = as_int(document.get("numTabs"))
    if raw_items is None:
        return StashProxy(items=None, num_tabs=num_tabs)
    return StashProxy(
        items=get_items(raw_items),
        num_tabs=num_tabs,
        tabs=get_tabs(document.get("tabs")),
    )


def get_character(raw: Dict[str, Any]) -> Character:
    return Character(
        name=as_str(raw.get("name")),
        league=as_str(raw.get("league")),
        class_name=as_str(raw.get("class")),
        level=as_int(raw.get("level")),
    )


def get_characters(raw_list: Any) -> List[Character]:
    if not isinstance(raw_list, list):
        return []
    return [get_character(c) for c in raw_list if isinstance(c, dict)]
