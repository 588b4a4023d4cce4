# poemodel/currency.py
import json
import os
from typing import Dict, Iterable, Optional

from .logger import get_logger
from .models import Currency, OrbType

logger = get_logger(__name__)

CURRENCY_RATIOS_PATH = os.getenv("CURRENCY_RATIOS_PATH", "").strip()

# Value of a single orb expressed in Gemcutter's Prisms (GCP).
DEFAULT_GCP_RATIOS: Dict[OrbType, float] = {
    OrbType.SCROLL_FRAGMENT: 1 / 1600,
    OrbType.SCROLL_OF_WISDOM: 1 / 320,
    OrbType.PORTAL_SCROLL: 1 / 280,
    OrbType.TRANSMUTATION_SHARD: 1 / 1400,
    OrbType.ORB_OF_TRANSMUTATION: 1 / 70,
    OrbType.ALTERATION_SHARD: 1 / 400,
    OrbType.ORB_OF_ALTERATION: 1 / 20,
    OrbType.ARMOURERS_SCRAP: 1 / 140,
    OrbType.BLACKSMITHS_WHETSTONE: 1 / 70,
    OrbType.JEWELLERS_ORB: 1 / 28,
    OrbType.CHROMATIC_ORB: 1 / 28,
    OrbType.ORB_OF_FUSING: 1 / 7,
    OrbType.ORB_OF_AUGMENTATION: 1 / 35,
    OrbType.ORB_OF_CHANCE: 1 / 28,
    OrbType.ORB_OF_ALCHEMY: 1 / 7,
    OrbType.ORB_OF_SCOURING: 1 / 7,
    OrbType.ORB_OF_REGRET: 1 / 3.5,
    OrbType.REGAL_ORB: 1 / 2,
    OrbType.CHAOS_ORB: 1 / 2,
    OrbType.BLESSED_ORB: 1 / 3.5,
    OrbType.GLASSBLOWERS_BAUBLE: 1 / 14,
    OrbType.CARTOGRAPHERS_CHISEL: 1 / 7,
    OrbType.GEMCUTTERS_PRISM: 1.0,
    OrbType.DIVINE_ORB: 4.0,
    OrbType.EXALTED_ORB: 20.0,
    OrbType.ETERNAL_ORB: 200.0,
    OrbType.MIRROR_OF_KALANDRA: 4000.0,
    OrbType.UNKNOWN: 0.0,
}


def load_ratios(path: str = CURRENCY_RATIOS_PATH) -> Dict[OrbType, float]:
    """
    Return the default ratio table, overridden by a JSON object of
    {"Chaos Orb": 0.5, ...} when a ratios file is configured.
    """
    ratios = dict(DEFAULT_GCP_RATIOS)
    if not path:
        return ratios
    if not os.path.exists(path):
        logger.warning("Currency ratios file %s not found; using defaults.", path)
        return ratios

    try:
        with open(path, "r", encoding="utf-8") as f:
            overrides = json.load(f)
    except Exception as e:
        logger.error("Failed to load currency ratios file %s: %s; using defaults.", path, e)
        return ratios

    if not isinstance(overrides, dict):
        logger.error("Currency ratios file %s must contain a JSON object; using defaults.", path)
        return ratios

    for name, value in overrides.items():
        orb = OrbType.from_type_line(str(name))
        if orb is OrbType.UNKNOWN:
            logger.warning("Ignoring ratio for unknown currency %r.", name)
            continue
        try:
            ratios[orb] = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric ratio %r for %s.", value, name)
    return ratios


_configured_ratios: Optional[Dict[OrbType, float]] = None


def configured_ratios() -> Dict[OrbType, float]:
    """Ratios from CURRENCY_RATIOS_PATH, read once per process."""
    global _configured_ratios
    if _configured_ratios is None:
        _configured_ratios = load_ratios(CURRENCY_RATIOS_PATH)
    return _configured_ratios


def get_gcp_distribution(
    currencies: Iterable[Currency], ratios: Optional[Dict[OrbType, float]] = None
) -> Dict[OrbType, float]:
    """Sum the GCP value of every stack, grouped by orb type."""
    table = ratios if ratios is not None else configured_ratios()
    out: Dict[OrbType, float] = {}
    for currency in currencies:
        value = currency.stack_size * table.get(currency.orb_type, 0.0)
        out[currency.orb_type] = out.get(currency.orb_type, 0.0) + value
    return out


def get_total_gcp(
    currencies: Iterable[Currency], ratios: Optional[Dict[OrbType, float]] = None
) -> float:
    return sum(get_gcp_distribution(currencies, ratios).values())
