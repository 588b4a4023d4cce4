# poemodel/stash.py
from typing import Callable, Dict, Iterable, List, Optional

from . import currency
from .models import Currency, Gear, Item, ItemKind, OrbType, Rarity, Tab
from .proxy_mapper import StashProxy, inventory_id

TAB_SIZE = 144


class Stash:
    """
    All items of a league stash (or of the subset of tabs fetched so far),
    together with the tab metadata reported by the first tab document.
    """

    def __init__(
        self,
        items: Optional[Iterable[Item]] = None,
        tabs: Optional[Iterable[Tab]] = None,
        number_of_tabs: int = 0,
    ):
        self._items: List[Item] = list(items or [])
        self.tabs: List[Tab] = list(tabs or [])
        self.number_of_tabs = number_of_tabs

    @classmethod
    def from_proxy(cls, proxy: StashProxy) -> "Stash":
        # A document without an item list is an empty stash; its tabs are ignored.
        if proxy.items is None:
            return cls()
        return cls(items=proxy.items, tabs=proxy.tabs, number_of_tabs=proxy.num_tabs)

    @property
    def items(self) -> List[Item]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, other: "Stash") -> None:
        self._items.extend(other._items)

    def refresh_tab(self, fetch_tab: Callable[[int], "Stash"], tab_id: int) -> None:
        """
        Replace the contents of one tab with a fresh copy from `fetch_tab`.
        The fetch happens before anything is removed, so a failing fetch
        leaves the stash as it was.
        """
        fresh = fetch_tab(tab_id)
        target = inventory_id(tab_id)
        kept = [i for i in self._items if i.inventory_id != target]
        kept.extend(fresh._items)
        self._items = kept

    def get_items_by_tab(self, tab_id: int) -> List[Item]:
        target = inventory_id(tab_id)
        return [i for i in self._items if i.inventory_id == target]

    def get_of_type(
        self,
        kind: Optional[ItemKind] = None,
        predicate: Optional[Callable[[Item], bool]] = None,
    ) -> List[Item]:
        """Items of variant `kind` (all items when None), optionally filtered by `predicate`."""
        out = [i for i in self._items if kind is None or i.kind is kind]
        if predicate is not None:
            out = [i for i in out if predicate(i)]
        return out

    def get_total_currency_value(self, ratios: Optional[Dict[OrbType, float]] = None) -> float:
        return currency.get_total_gcp(self._currencies(), ratios)

    def get_currency_value_distribution(
        self, ratios: Optional[Dict[OrbType, float]] = None
    ) -> Dict[OrbType, float]:
        return currency.get_gcp_distribution(self._currencies(), ratios)

    def _currencies(self) -> List[Currency]:
        return [i for i in self.get_of_type(ItemKind.CURRENCY) if isinstance(i, Currency)]

    def get_duplicate_rares(self) -> Dict[str, List[Gear]]:
        groups: Dict[str, List[Gear]] = {}
        for item in self.get_of_type(ItemKind.GEAR, lambda g: g.rarity is Rarity.RARE and g.name != ""):
            groups.setdefault(item.name, []).append(item)
        return {name: gear for name, gear in groups.items() if len(gear) > 1}

    def calculate_free_space(self) -> Dict[str, float]:
        """
        Percentage of capacity occupied by item footprints, for the whole
        stash ("All") and per inventory id. Values are not capped at 100.
        """
        free_space: Dict[str, float] = {}
        total_space = self.number_of_tabs * TAB_SIZE
        used = sum(i.w * i.h for i in self._items)
        free_space["All"] = used / total_space * 100 if total_space else 0.0

        per_tab: Dict[str, int] = {}
        for item in self._items:
            per_tab[item.inventory_id] = per_tab.get(item.inventory_id, 0) + item.w * item.h
        for key, area in per_tab.items():
            free_space[key] = area / TAB_SIZE * 100

        return free_space
