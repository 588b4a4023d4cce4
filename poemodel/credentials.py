# poemodel/credentials.py
from contextlib import contextmanager
from typing import Iterator


class Credential:
    """
    Password holder with explicit lifetime. The secret lives in a mutable
    buffer that wipe() overwrites with zeros; using the credential as a
    context manager wipes it on every exit path.
    """

    def __init__(self, secret: str | bytes):
        raw = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
        self._buffer = bytearray(raw)
        self._wiped = False

    @property
    def wiped(self) -> bool:
        return self._wiped

    @contextmanager
    def reveal(self) -> Iterator[str]:
        if self._wiped:
            raise ValueError("Credential has already been wiped")
        yield self._buffer.decode("utf-8")

    def wipe(self) -> None:
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._wiped = True

    def __enter__(self) -> "Credential":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return "Credential(<wiped>)" if self._wiped else "Credential(<hidden>)"
