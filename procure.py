import os
from typing import Any, Dict

from poemodel import currency
from poemodel.credentials import Credential
from poemodel.events import EventState, ImageLoadEvent, StashLoadEvent
from poemodel.logger import get_logger
from poemodel.model import POEModel
from poemodel.stash import Stash

logger = get_logger(__name__)


def load_settings() -> Dict[str, Any]:
    settings = {
        "email": os.getenv("POE_EMAIL", "").strip(),
        "password": os.getenv("POE_PASSWORD", ""),
        "league": os.getenv("POE_LEAGUE", "Standard").strip() or "Standard",
        "offline": os.getenv("POE_OFFLINE", "false").lower() == "true",
        "force_refresh": os.getenv("POE_FORCE_REFRESH", "false").lower() == "true",
        "fetch_images": os.getenv("POE_FETCH_IMAGES", "false").lower() == "true",
    }

    if not settings["email"]:
        logger.error("POE_EMAIL must be set.")
        raise SystemExit(1)

    if not settings["offline"] and not settings["password"]:
        logger.error("POE_PASSWORD must be set unless POE_OFFLINE=true.")
        raise SystemExit(1)

    return settings


def _log_stash_progress(event: StashLoadEvent) -> None:
    if event.state is EventState.BEFORE:
        logger.info("Loading stash tab %d...", event.index + 1)
    else:
        logger.info("Loaded stash tab %d of %d.", event.index + 1, event.number_of_tabs)


def _log_image_progress(event: ImageLoadEvent) -> None:
    if event.state is EventState.AFTER:
        logger.debug("Loaded image for %s.", event.name)


def summarize(stash: Stash) -> None:
    free_space = stash.calculate_free_space()
    logger.info("Stash usage: %.1f%% of %d tabs.", free_space.pop("All"), stash.number_of_tabs)
    for inventory_id, pct in sorted(free_space.items()):
        logger.info("  %s: %.1f%% used", inventory_id, pct)

    duplicates = stash.get_duplicate_rares()
    if duplicates:
        for name, gear in sorted(duplicates.items()):
            logger.info("Duplicate rare '%s' x%d", name, len(gear))
    else:
        logger.info("No duplicate rares.")

    ratios = currency.configured_ratios()
    distribution = stash.get_currency_value_distribution(ratios)
    for orb, value in sorted(distribution.items(), key=lambda kv: kv[1], reverse=True):
        if value:
            logger.info("  %s: %.2f GCP", orb.value, value)
    logger.info("Total currency value: %.2f GCP", stash.get_total_currency_value(ratios))


def run_once(model: POEModel | None = None) -> int:
    settings = load_settings()
    model = model or POEModel()
    model.subscribe(StashLoadEvent, _log_stash_progress)
    model.subscribe(ImageLoadEvent, _log_image_progress)

    model.authenticate(settings["email"], Credential(settings["password"]), settings["offline"])

    if settings["force_refresh"]:
        model.force_refresh()

    stash = model.get_full_stash(settings["league"])
    if settings["fetch_images"]:
        model.get_images(stash)

    summarize(stash)
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(run_once())
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        raise SystemExit(2)
