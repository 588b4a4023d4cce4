# poemodel/model.py
import json
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .credentials import Credential
from .events import (
    UNKNOWN_TAB_COUNT,
    AuthenticateEvent,
    EventBus,
    EventState,
    ImageLoadEvent,
    StashLoadEvent,
)
from .exceptions import AuthenticationError, MalformedResponse, NotAuthenticated
from .interfaces import Cache, Transport
from .items import get_items
from .logger import get_logger, log_file_path, log_raw_document
from .models import Character, Item, Tab
from .proxy_mapper import get_characters, get_stash_proxy
from .stash import Stash
from .storage import CacheService

logger = get_logger(__name__)

TransportFactory = Callable[[str, Cache, bool], Transport]
CacheFactory = Callable[[str], Cache]


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def _default_transport_factory(identity: str, cache: Cache, offline: bool) -> Transport:
    from transports import get_transport

    return get_transport(identity, cache, offline)


class POEModel:
    """
    Session-scoped orchestrator: owns the transport and cache for one
    authenticated account and turns remote documents into model objects.
    Holds no item data itself.
    """

    def __init__(
        self,
        transport_factory: Optional[TransportFactory] = None,
        cache_factory: Optional[CacheFactory] = None,
    ):
        self._transport_factory = transport_factory or _default_transport_factory
        self._cache_factory = cache_factory or CacheService
        self._bus = EventBus()
        self.transport: Optional[Transport] = None
        self.cache: Optional[Cache] = None
        self.state = SessionState.UNAUTHENTICATED
        self.offline = False

    def subscribe(self, event_type: type, handler: Callable[[Any], Any]) -> None:
        self._bus.subscribe(event_type, handler)

    def unsubscribe(self, event_type: type, handler: Callable[[Any], Any]) -> None:
        self._bus.unsubscribe(event_type, handler)

    def authenticate(self, identity: str, secret: Union[Credential, str], offline: bool = False) -> bool:
        credential = secret if isinstance(secret, Credential) else Credential(secret)
        with credential:
            self.cache = self._cache_factory(identity)
            self.transport = self._transport_factory(identity, self.cache, offline)
            self.offline = offline

            if offline:
                logger.info("Offline session for %s; skipping remote login.", identity)
                self.state = SessionState.AUTHENTICATED
                return True

            self.state = SessionState.AUTHENTICATING
            self._bus.emit(AuthenticateEvent(identity, EventState.BEFORE))
            try:
                with credential.reveal() as password:
                    accepted = self.transport.authenticate(identity, password)
                if not accepted:
                    raise AuthenticationError(f"Login rejected for {identity}")
            except Exception:
                self.state = SessionState.UNAUTHENTICATED
                raise

            self.state = SessionState.AUTHENTICATED
            self._bus.emit(AuthenticateEvent(identity, EventState.AFTER))
            logger.info("Authenticated %s.", identity)
            return True

    def _require_transport(self) -> Transport:
        if self.state is not SessionState.AUTHENTICATED or self.transport is None:
            raise NotAuthenticated("authenticate() must succeed before fetching")
        return self.transport

    def force_refresh(self) -> None:
        self._require_transport()
        self.cache.clear()

    def _malformed(self, prefix: str, raw: bytes, what: str) -> MalformedResponse:
        log_raw_document(logger, prefix, raw)
        return MalformedResponse(
            prefix,
            raw,
            f"Downloading {what} failed, details logged to {log_file_path()}; "
            "please open an issue and attach the log.",
        )

    def _read_document(self, raw: bytes, what: str) -> Any:
        try:
            document = json.loads(raw)
        except ValueError as exc:
            logger.error("Failed to deserialize %s: %s", what, exc)
            raise self._malformed("JSON Serialization Failed", raw, what) from exc
        if document is None:
            raise self._malformed("Proxy was null", raw, what)
        return document

    def get_single_tab(self, index: int, league: str, force_refresh: bool = False) -> Stash:
        transport = self._require_transport()
        self._bus.emit(StashLoadEvent(index, UNKNOWN_TAB_COUNT, EventState.BEFORE))

        raw = transport.get_stash(index, league, force_refresh)
        document = self._read_document(raw, "stash")
        if not isinstance(document, dict):
            raise self._malformed("Unexpected stash document", raw, "stash")
        proxy = get_stash_proxy(document)

        self._bus.emit(StashLoadEvent(index, proxy.num_tabs, EventState.AFTER))
        return Stash.from_proxy(proxy)

    def get_full_stash(self, league: str) -> Stash:
        stash = self.get_single_tab(0, league, False)
        for i in range(1, stash.number_of_tabs):
            stash.add(self.get_single_tab(i, league, False))
        logger.info(
            "Loaded %d tabs (%d items) for league %s.",
            stash.number_of_tabs, len(stash), league,
        )
        return stash

    def refresh_tab(self, stash: Stash, league: str, tab_id: int) -> None:
        stash.refresh_tab(lambda i: self.get_single_tab(i, league, True), tab_id)

    def get_characters(self) -> List[Character]:
        raw = self._require_transport().get_characters()
        document = self._read_document(raw, "characters")
        if not isinstance(document, list):
            raise self._malformed("Unexpected characters document", raw, "characters")
        return get_characters(document)

    def get_inventory(self, character_name: str) -> List[Item]:
        raw = self._require_transport().get_inventory(character_name)
        document = self._read_document(raw, "inventory")
        if not isinstance(document, dict):
            raise self._malformed("Unexpected inventory document", raw, "inventory")
        return get_items(document.get("items"))

    def get_images(self, source: Union[Stash, List[Item]]) -> None:
        """
        Fetch every distinct item icon, then (for a stash) every tab icon,
        so later lookups are served from the cache.
        """
        items = source.items if isinstance(source, Stash) else list(source)
        distinct: Dict[str, Item] = {}
        for item in items:
            distinct.setdefault(item.icon_url, item)
        for item in distinct.values():
            self._get_image_with_events(item.display_name, item.icon_url)

        if isinstance(source, Stash):
            for tab in source.tabs:
                self._get_image_with_events(f"Tab Icon {tab.i}", tab.src)

    def get_image(self, item: Item) -> bytes:
        return self._get_image_with_events(item.display_name, item.icon_url)

    def get_tab_image(self, tab: Tab) -> bytes:
        return self._get_image_with_events(tab.name, tab.src)

    def _get_image_with_events(self, name: str, url: str) -> bytes:
        transport = self._require_transport()
        self._bus.emit(ImageLoadEvent(name, EventState.BEFORE))
        data = transport.get_image(url)
        self._bus.emit(ImageLoadEvent(name, EventState.AFTER))
        return data

    def calculate_free_space(self, stash: Stash) -> Dict[str, float]:
        return stash.calculate_free_space()
