from typing import Optional
from urllib.parse import urlparse

from cryptography.hazmat.primitives import hashes, hmac
from fastapi import Request

DEFAULT_SOURCE_PAGE = "contact"


def get_client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return None


def hash_ip(ip: str, salt: str) -> str:
    """
    Keyed SHA-256 HMAC of the client IP, hex encoded.

    Only this digest is stored so enquiries from the same address can be
    correlated without keeping the address itself.
    """
    h = hmac.HMAC(salt.encode("utf-8"), hashes.SHA256())
    h.update(ip.encode("utf-8"))
    return h.finalize().hex()


def extract_slug_from_referer(referer: Optional[str]) -> Optional[str]:
    if not referer:
        return None
    try:
        parsed = urlparse(referer)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return parsed.path.strip("/") or None
