"""
Salesforce session discovery.

Picks the ``sid`` cookie of the org being synced from the cookies of a browser
profile. Lightning hostnames (``my-org.lightning.force.com``) and My Domain
hostnames (``my-org.my.salesforce.com``) of the same org are matched through
their shared first hostname label.
"""

import logging
from http.cookiejar import MozillaCookieJar
from pathlib import Path
from typing import Iterable, List, Optional, Union

from application.services.salesforce.models.types import SalesforceSession, SessionCookie
from common.config.config import SALESFORCE_SESSION_COOKIE
from common.exception.exceptions import NoMatchingSessionError, NoSessionError

logger = logging.getLogger(__name__)


def _normalize_domain(domain: str) -> str:
    return domain.lstrip(".").lower()


def _match_domain_hint(cookies: List[SessionCookie], domain_hint: str) -> Optional[SessionCookie]:
    hint = domain_hint.lower()

    # 1. Containment in either direction
    for cookie in cookies:
        domain = _normalize_domain(cookie.domain)
        if domain in hint or hint in domain:
            return cookie

    # 2. Shared org name (first hostname label); skip trivial labels like "www"
    org_token = hint.split(".")[0]
    if len(org_token) > 2:
        for cookie in cookies:
            domain = _normalize_domain(cookie.domain)
            if org_token in domain and "salesforce.com" in domain:
                return cookie

    return None


def _match_default(cookies: List[SessionCookie]) -> Optional[SessionCookie]:
    for marker in ("my.salesforce.com", "salesforce.com"):
        for cookie in cookies:
            if marker in _normalize_domain(cookie.domain):
                return cookie
    return None


def select_session(
    cookies: Iterable[SessionCookie],
    domain_hint: Optional[str] = None,
) -> SalesforceSession:
    """Choose the session cookie for an org.

    Args:
        cookies: Candidate cookies; only those named ``sid`` are considered
        domain_hint: Hostname of the org the user is working in

    Returns:
        SalesforceSession built from the matched cookie

    Raises:
        NoSessionError: If there is no candidate cookie at all
        NoMatchingSessionError: If no candidate matches
    """
    candidates = [c for c in cookies if c.name == SALESFORCE_SESSION_COOKIE and c.value]
    logger.debug(f"Session cookies found: {[c.domain for c in candidates]}")

    if not candidates:
        raise NoSessionError()

    if domain_hint:
        cookie = _match_domain_hint(candidates, domain_hint)
    else:
        cookie = _match_default(candidates)

    if cookie is None:
        raise NoMatchingSessionError(domain_hint)

    domain = _normalize_domain(cookie.domain)
    logger.info(f"Matched Salesforce session cookie for domain {domain}")
    return SalesforceSession(server_url=f"https://{domain}", session_id=cookie.value)


def load_cookies_from_file(path: Union[str, Path]) -> List[SessionCookie]:
    """Read cookies from a Netscape/Mozilla ``cookies.txt`` export."""
    jar = MozillaCookieJar(str(path))
    jar.load(ignore_discard=True, ignore_expires=True)
    return [
        SessionCookie(domain=cookie.domain, value=cookie.value or "", name=cookie.name)
        for cookie in jar
    ]
