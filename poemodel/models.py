# poemodel/models.py
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple


class ItemKind(str, Enum):
    GEAR = "gear"
    CURRENCY = "currency"
    MAP = "map"
    GEM = "gem"
    CARD = "card"
    GENERIC = "generic"


class Rarity(Enum):
    NORMAL = 0
    MAGIC = 1
    RARE = 2
    UNIQUE = 3
    GEM = 4
    CURRENCY = 5
    DIVINATION_CARD = 6
    QUEST = 7
    UNKNOWN = -1

    @classmethod
    def from_frame_type(cls, frame_type: int) -> "Rarity":
        try:
            return cls(frame_type)
        except ValueError:
            return cls.UNKNOWN


class OrbType(str, Enum):
    SCROLL_FRAGMENT = "Scroll Fragment"
    SCROLL_OF_WISDOM = "Scroll of Wisdom"
    PORTAL_SCROLL = "Portal Scroll"
    TRANSMUTATION_SHARD = "Transmutation Shard"
    ORB_OF_TRANSMUTATION = "Orb of Transmutation"
    ALTERATION_SHARD = "Alteration Shard"
    ORB_OF_ALTERATION = "Orb of Alteration"
    ARMOURERS_SCRAP = "Armourer's Scrap"
    BLACKSMITHS_WHETSTONE = "Blacksmith's Whetstone"
    JEWELLERS_ORB = "Jeweller's Orb"
    CHROMATIC_ORB = "Chromatic Orb"
    ORB_OF_FUSING = "Orb of Fusing"
    ORB_OF_AUGMENTATION = "Orb of Augmentation"
    ORB_OF_CHANCE = "Orb of Chance"
    ORB_OF_ALCHEMY = "Orb of Alchemy"
    ORB_OF_SCOURING = "Orb of Scouring"
    ORB_OF_REGRET = "Orb of Regret"
    REGAL_ORB = "Regal Orb"
    CHAOS_ORB = "Chaos Orb"
    BLESSED_ORB = "Blessed Orb"
    GLASSBLOWERS_BAUBLE = "Glassblower's Bauble"
    CARTOGRAPHERS_CHISEL = "Cartographer's Chisel"
    GEMCUTTERS_PRISM = "Gemcutter's Prism"
    DIVINE_ORB = "Divine Orb"
    EXALTED_ORB = "Exalted Orb"
    ETERNAL_ORB = "Eternal Orb"
    MIRROR_OF_KALANDRA = "Mirror of Kalandra"
    UNKNOWN = "Unknown"

    @classmethod
    def from_type_line(cls, type_line: str) -> "OrbType":
        try:
            return cls(type_line.strip())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Property:
    name: str
    values: Tuple[str, ...] = ()

    @property
    def first_value(self) -> str:
        return self.values[0] if self.values else ""


@dataclass(frozen=True, eq=False)
class Item:
    """
    Normalized representation of one item as reported by a stash tab or a
    character inventory. Items are never mutated after the factory builds them.
    """
    kind: ClassVar[ItemKind] = ItemKind.GENERIC

    w: int = 0
    h: int = 0
    name: str = ""
    type_line: str = ""
    inventory_id: str = ""
    rarity: Rarity = Rarity.UNKNOWN
    icon_url: str = ""
    league: str = ""
    x: int = 0
    y: int = 0
    identified: bool = True
    corrupted: bool = False
    descr_text: str = ""
    properties: Tuple[Property, ...] = ()
    explicit_mods: Tuple[str, ...] = ()
    implicit_mods: Tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name if self.name else self.type_line

    @property
    def area(self) -> int:
        return self.w * self.h

    def get_property(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    @property
    def quality(self) -> int:
        prop = self.get_property("Quality")
        if prop is None:
            return 0
        digits = "".join(ch for ch in prop.first_value if ch.isdigit())
        return int(digits) if digits else 0


@dataclass(frozen=True, eq=False)
class Gear(Item):
    kind: ClassVar[ItemKind] = ItemKind.GEAR

    sockets: Tuple[str, ...] = ()
    socketed_items: Tuple[Item, ...] = ()


@dataclass(frozen=True, eq=False)
class Currency(Item):
    kind: ClassVar[ItemKind] = ItemKind.CURRENCY

    orb_type: OrbType = OrbType.UNKNOWN
    stack_size: int = 1


@dataclass(frozen=True, eq=False)
class Map(Item):
    kind: ClassVar[ItemKind] = ItemKind.MAP

    map_level: int = 0


@dataclass(frozen=True, eq=False)
class Gem(Item):
    kind: ClassVar[ItemKind] = ItemKind.GEM

    level: int = 1


@dataclass(frozen=True, eq=False)
class Card(Item):
    kind: ClassVar[ItemKind] = ItemKind.CARD

    stack_size: int = 1
    stack_max: int = 1


@dataclass(frozen=True, eq=False)
class GenericItem(Item):
    kind: ClassVar[ItemKind] = ItemKind.GENERIC


@dataclass(frozen=True)
class Tab:
    i: int
    name: str = ""
    src: str = ""


@dataclass(frozen=True)
class Character:
    name: str
    league: str = ""
    class_name: str = ""
    level: int = 0
