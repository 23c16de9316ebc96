"""
app/services/ip_resolver.py

Works out the public IP address a submission is attributed to.

Order of preference:
  1. First hop of X-Forwarded-For (set by the proxy in front of the app)
  2. The socket peer address
  3. The external lookup service, when the address from 1/2 is missing
     or not public and ``settings.ip_lookup_url`` is configured

The IP is an anti-abuse signal, not a hard requirement: every failure
yields the "unknown" sentinel instead of an error.
"""

from __future__ import annotations

import ipaddress
from typing import Optional

import httpx
from starlette.requests import Request

from app.core.config import settings
from app.core.constants import UNKNOWN_IP
from app.core.logger import get_logger

logger = get_logger(__name__)


def _is_public(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).is_global
    except ValueError:
        return False


def address_from_request(request: Request) -> Optional[str]:
    """Return the client address the request carries, if any."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


class ClientIpResolver:

    def __init__(
        self,
        lookup_url: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._lookup_url = lookup_url if lookup_url is not None else settings.ip_lookup_url
        self._transport = transport

    async def resolve(self, request: Optional[Request] = None) -> str:
        address = address_from_request(request) if request is not None else None
        if address and _is_public(address):
            return address

        if self._lookup_url:
            looked_up = await self.lookup()
            if looked_up != UNKNOWN_IP:
                return looked_up

        return address or UNKNOWN_IP

    async def lookup(self) -> str:
        """Ask the external lookup service; "unknown" on any failure."""
        if not self._lookup_url:
            return UNKNOWN_IP
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout, transport=self._transport
            ) as client:
                response = await client.get(self._lookup_url, params={"format": "json"})
                response.raise_for_status()
                ip = response.json().get("ip")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("IP lookup failed: %s", exc)
            return UNKNOWN_IP

        if not isinstance(ip, str) or not ip:
            logger.warning("IP lookup returned no address.")
            return UNKNOWN_IP
        return ip
