# poemodel/items.py
import re
from typing import Any, Dict, List, Tuple

from .logger import get_logger
from .models import (
    Card,
    Currency,
    Gear,
    Gem,
    GenericItem,
    Item,
    Map,
    OrbType,
    Property,
    Rarity,
)

logger = get_logger(__name__)

FRAME_GEM = 4
FRAME_CURRENCY = 5
FRAME_DIVINATION_CARD = 6
GEAR_FRAMES = (0, 1, 2, 3)

MAP_DEVICE_MARKERS = ("Map Device", "Travel to this Map")

_SET_MARKUP_RE = re.compile(r"<<set:[^>]*>>")


def as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return _SET_MARKUP_RE.sub("", value).strip()
    return str(value)


def as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default


def _bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    return bool(value)


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(as_str(v) for v in value if v is not None)


def _properties(value: Any) -> Tuple[Property, ...]:
    """
    Properties arrive as [{"name": "Quality", "values": [["+20%", 1]]}, ...];
    each value pair is reduced to its display string.
    """
    if not isinstance(value, list):
        return ()
    out: List[Property] = []
    for prop in value:
        if not isinstance(prop, dict):
            continue
        values: List[str] = []
        raw_values = prop.get("values")
        if isinstance(raw_values, list):
            for pair in raw_values:
                if isinstance(pair, list) and pair:
                    values.append(as_str(pair[0]))
                elif pair is not None:
                    values.append(as_str(pair))
        out.append(Property(name=as_str(prop.get("name")), values=tuple(values)))
    return tuple(out)


def _stack(properties: Tuple[Property, ...], descriptor: Dict[str, Any]) -> Tuple[int, int]:
    """Return (stack_size, stack_max) from the descriptor or its "Stack Size" property."""
    size = as_int(descriptor.get("stackSize"), 0)
    maximum = as_int(descriptor.get("maxStackSize"), 0)
    if size <= 0:
        for prop in properties:
            if prop.name == "Stack Size" and prop.values:
                current, _, total = prop.first_value.partition("/")
                size = as_int(current.replace(",", ""), 1)
                maximum = maximum or as_int(total.replace(",", ""), size)
                break
    size = size if size > 0 else 1
    return size, maximum if maximum > 0 else size


def _property_int(properties: Tuple[Property, ...], name: str, default: int) -> int:
    for prop in properties:
        if prop.name == name and prop.values:
            digits = "".join(ch for ch in prop.first_value if ch.isdigit())
            return int(digits) if digits else default
    return default


def _common_fields(descriptor: Dict[str, Any]) -> Dict[str, Any]:
    frame_type = as_int(descriptor.get("frameType"), -1)
    return {
        "w": as_int(descriptor.get("w")),
        "h": as_int(descriptor.get("h")),
        "name": as_str(descriptor.get("name")),
        "type_line": as_str(descriptor.get("typeLine")),
        "inventory_id": as_str(descriptor.get("inventoryId")),
        "rarity": Rarity.from_frame_type(frame_type),
        "icon_url": as_str(descriptor.get("icon")),
        "league": as_str(descriptor.get("league")),
        "x": as_int(descriptor.get("x")),
        "y": as_int(descriptor.get("y")),
        "identified": _bool(descriptor.get("identified"), True),
        "corrupted": _bool(descriptor.get("corrupted"), False),
        "descr_text": as_str(descriptor.get("descrText")),
        "properties": _properties(descriptor.get("properties")),
        "explicit_mods": _str_tuple(descriptor.get("explicitMods")),
        "implicit_mods": _str_tuple(descriptor.get("implicitMods")),
    }


def _is_map(fields: Dict[str, Any]) -> bool:
    if "Map" not in fields["type_line"]:
        return False
    return any(marker in fields["descr_text"] for marker in MAP_DEVICE_MARKERS)


def _sockets(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(as_str(s.get("attr")) for s in value if isinstance(s, dict))


def get_item(descriptor: Any) -> Item:
    """
    Build the typed item variant for one raw item descriptor.

    Never raises: descriptors that are not mappings become an empty
    GenericItem, unrecognised categories become a GenericItem carrying
    whatever common fields could be read.
    """
    if not isinstance(descriptor, dict):
        logger.warning("Item descriptor is not an object (%s); using empty item.", type(descriptor).__name__)
        return GenericItem()

    fields = _common_fields(descriptor)
    frame_type = as_int(descriptor.get("frameType"), -1)

    if frame_type == FRAME_GEM:
        return Gem(level=_property_int(fields["properties"], "Level", 1), **fields)

    if frame_type == FRAME_CURRENCY:
        size, _ = _stack(fields["properties"], descriptor)
        return Currency(
            orb_type=OrbType.from_type_line(fields["type_line"]),
            stack_size=size,
            **fields,
        )

    if frame_type == FRAME_DIVINATION_CARD:
        size, maximum = _stack(fields["properties"], descriptor)
        return Card(stack_size=size, stack_max=maximum, **fields)

    if _is_map(fields):
        return Map(map_level=_property_int(fields["properties"], "Map Level", 0), **fields)

    if frame_type in GEAR_FRAMES:
        socketed_raw = descriptor.get("socketedItems")
        socketed = tuple(get_item(s) for s in socketed_raw) if isinstance(socketed_raw, list) else ()
        return Gear(
            sockets=_sockets(descriptor.get("sockets")),
            socketed_items=socketed,
            **fields,
        )

    logger.debug(
        "Unrecognised item category frameType=%s typeLine=%r; using generic item.",
        frame_type, fields["type_line"],
    )
    return GenericItem(**fields)


def get_items(descriptors: Any) -> List[Item]:
    if not isinstance(descriptors, list):
        return []
    return [get_item(d) for d in descriptors]
