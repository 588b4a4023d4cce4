# poemodel/interfaces.py
from typing import Protocol


class Transport(Protocol):
    """Blocking access to the remote service. Every document is raw JSON bytes."""

    def authenticate(self, identity: str, password: str) -> bool: ...

    def get_stash(self, index: int, league: str, force_refresh: bool) -> bytes: ...

    def get_characters(self) -> bytes: ...

    def get_inventory(self, character_name: str) -> bytes: ...

    def get_image(self, url: str) -> bytes: ...


class Cache(Protocol):
    def clear(self) -> None: ...
