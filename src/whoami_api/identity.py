"""Client identity resolution.

A client is keyed by its IP address as a plain string. Forwarded headers are
only honoured when the deployment sits behind a trusted proxy. Values are not
validated as IP addresses; anything that is not recognised is used verbatim.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

LOOPBACK = "127.0.0.1"
UNKNOWN_CLIENT = ""

_MAPPED_PREFIX = "::ffff:"
_LOOPBACK_ALIASES = frozenset({"::1", "[::1]", "0:0:0:0:0:0:0:1"})


def normalize_address(address: str) -> str:
    address = address.strip()
    if address.lower().startswith(_MAPPED_PREFIX):
        address = address[len(_MAPPED_PREFIX):]
    if address in _LOOPBACK_ALIASES:
        return LOOPBACK
    return address


def resolve_client_id(
    forwarded_for: Optional[str],
    peer: Optional[str],
    *,
    trust_proxy: bool,
) -> str:
    """Return the canonical client key for one request.

    ``forwarded_for`` is the raw ``X-Forwarded-For`` (or ``X-Real-IP``)
    header value, ``peer`` the transport-level address.
    """
    if trust_proxy and forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return normalize_address(first)
    if peer:
        return normalize_address(peer)
    return UNKNOWN_CLIENT


def client_id_from_request(request: Request, trust_proxy: bool) -> str:
    forwarded_for = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
    peer = request.client.host if request.client else None
    return resolve_client_id(forwarded_for, peer, trust_proxy=trust_proxy)
