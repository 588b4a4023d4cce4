# transports/cached.py
from poemodel.exceptions import OfflineCacheMiss
from poemodel.interfaces import Transport
from poemodel.logger import get_logger
from poemodel.storage import CHARACTERS_KEY, CacheService, inventory_key, stash_key

logger = get_logger(__name__)


class CachedTransport:
    """
    Puts a CacheService in front of another transport.

    Stash tabs are answered from the cache unless a refresh is forced and
    images are cached unconditionally. Characters and inventories are always
    fetched online but remembered, so an offline session can still show them.
    """

    def __init__(self, inner: Transport, cache: CacheService, offline: bool = False):
        self.inner = inner
        self.cache = cache
        self.offline = offline

    def _cached_or_miss(self, key: str) -> bytes:
        body = self.cache.get_document(key)
        if body is None:
            raise OfflineCacheMiss(f"{key} is not cached and the session is offline")
        return body

    def authenticate(self, identity: str, password: str) -> bool:
        if self.offline:
            return True
        return self.inner.authenticate(identity, password)

    def get_stash(self, index: int, league: str, force_refresh: bool = False) -> bytes:
        key = stash_key(league, index)
        if self.offline:
            return self._cached_or_miss(key)

        if not force_refresh:
            body = self.cache.get_document(key)
            if body is not None:
                logger.debug("Stash tab %d (%s) served from cache.", index, league)
                return body

        body = self.inner.get_stash(index, league, force_refresh)
        self.cache.put_document(key, body)
        return body

    def get_characters(self) -> bytes:
        if self.offline:
            return self._cached_or_miss(CHARACTERS_KEY)
        body = self.inner.get_characters()
        self.cache.put_document(CHARACTERS_KEY, body)
        return body

    def get_inventory(self, character_name: str) -> bytes:
        key = inventory_key(character_name)
        if self.offline:
            return self._cached_or_miss(key)
        body = self.inner.get_inventory(character_name)
        self.cache.put_document(key, body)
        return body

    def get_image(self, url: str) -> bytes:
        body = self.cache.get_image(url)
        if body is not None:
            return body
        if self.offline:
            raise OfflineCacheMiss(f"Image {url} is not cached and the session is offline")
        body = self.inner.get_image(url)
        self.cache.put_image(url, body)
        return body
