# transports/http.py
import os
import time
from urllib.parse import quote, urlparse

import requests
from bs4 import BeautifulSoup
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from poemodel.exceptions import AuthenticationError, TransportError
from poemodel.logger import get_logger

logger = get_logger(__name__)

BASE_URL = os.getenv("POE_BASE_URL", "https://www.pathofexile.com").rstrip("/")
USER_AGENT = os.getenv(
    "POE_USER_AGENT",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)
PROXY_URL = os.getenv("POE_PROXY_URL", "").strip()
HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "30"))
HTTP_MAX_ATTEMPTS = int(os.getenv("HTTP_MAX_ATTEMPTS", "3"))

# Seconds between two character-window requests; the service rate limits these.
REQUEST_MIN_SPACING = float(os.getenv("REQUEST_MIN_SPACING", "1.5"))

LOGIN_PATH = "/login"
STASH_PATH = "/character-window/get-stash-items?league={league}&tabs=1&tabIndex={index}"
CHARACTERS_PATH = "/character-window/get-characters"
INVENTORY_PATH = "/character-window/get-items?character={character}"


def ensure_absolute_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if not url.startswith("/"):
        url = "/" + url
    return f"{BASE_URL}{url}"


def extract_login_hash(html: str) -> str:
    """Return the anti-forgery token the login form expects to be posted back."""
    soup = BeautifulSoup(html, "html.parser")
    field = soup.find("input", attrs={"name": "hash"})
    if field is None:
        return ""
    value = field.get("value")
    return value if isinstance(value, str) else ""


class HttpTransport:
    """Direct, uncached access to the remote service over a requests session."""

    def __init__(self, identity: str, session: requests.Session | None = None):
        self.identity = identity
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        if PROXY_URL:
            self.session.proxies.update({"http": PROXY_URL, "https": PROXY_URL})
        self._last_request_ts = 0.0

    def _apply_spacing(self, url: str) -> None:
        since_last = time.time() - self._last_request_ts
        if since_last < REQUEST_MIN_SPACING:
            wait_for = REQUEST_MIN_SPACING - since_last
            logger.debug("Request spacing: waiting %.2fs before %s", wait_for, url)
            time.sleep(wait_for)
        self._last_request_ts = time.time()

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        wait=wait_exponential_jitter(initial=1, max=30),
        stop=stop_after_attempt(HTTP_MAX_ATTEMPTS),
        reraise=True,
    )
    def _fetch(self, url: str) -> requests.Response:
        r = self.session.get(url, timeout=HTTP_TIMEOUT)
        r.raise_for_status()
        return r

    def _get(self, url: str, throttled: bool = True) -> requests.Response:
        if throttled:
            self._apply_spacing(url)
        logger.debug("GET %s", url)
        try:
            return self._fetch(url)
        except requests.RequestException as exc:
            logger.error("GET %s failed: %s", url, exc)
            raise TransportError(f"GET {url} failed: {exc}") from exc

    def authenticate(self, identity: str, password: str) -> bool:
        login_url = f"{BASE_URL}{LOGIN_PATH}"
        page = self._get(login_url, throttled=False)
        form = {
            "login_email": identity,
            "login_password": password,
            "remember_me": "0",
            "hash": extract_login_hash(page.text),
            "login": "Login",
        }

        try:
            r = self.session.post(login_url, data=form, allow_redirects=False, timeout=HTTP_TIMEOUT)
        except requests.RequestException as exc:
            logger.error("Login request for %s failed: %s", identity, exc)
            raise TransportError(f"Login request failed: {exc}") from exc

        # A successful login redirects to the account page; a rejected one re-renders the form.
        if r.status_code != 302:
            logger.warning("Login for %s rejected (status %s).", identity, r.status_code)
            raise AuthenticationError(f"Login failed for {identity} (status {r.status_code})")

        logger.debug("Login for %s redirected to %s", identity, r.headers.get("Location", ""))
        return True

    def get_stash(self, index: int, league: str, force_refresh: bool = False) -> bytes:
        url = BASE_URL + STASH_PATH.format(league=quote(league), index=index)
        return self._get(url).content

    def get_characters(self) -> bytes:
        return self._get(BASE_URL + CHARACTERS_PATH).content

    def get_inventory(self, character_name: str) -> bytes:
        url = BASE_URL + INVENTORY_PATH.format(character=quote(character_name))
        return self._get(url).content

    def get_image(self, url: str) -> bytes:
        return self._get(ensure_absolute_url(url), throttled=False).content
