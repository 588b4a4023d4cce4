# poemodel/events.py
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Type

from .logger import get_logger

logger = get_logger(__name__)

UNKNOWN_TAB_COUNT = -1


class EventState(str, Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class AuthenticateEvent:
    identity: str
    state: EventState


@dataclass(frozen=True)
class StashLoadEvent:
    index: int
    number_of_tabs: int
    state: EventState


@dataclass(frozen=True)
class ImageLoadEvent:
    name: str
    state: EventState


Handler = Callable[[Any], Any]


class EventBus:
    """
    Synchronous publish/subscribe keyed by event payload type. Handlers run
    on the emitting thread, in subscription order, immediately when emit()
    is called.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[Any], List[Handler]] = {}

    def subscribe(self, event_type: Type[Any], handler: Handler) -> None:
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Subscribed %s to %s", handler, event_type.__name__)

    def unsubscribe(self, event_type: Type[Any], handler: Handler) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event_type]

    def clear(self) -> None:
        self._handlers.clear()

    def emit(self, event: Any) -> None:
        for handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception as exc:
                logger.exception("Error in handler %s for %s: %s", handler, event, exc)
