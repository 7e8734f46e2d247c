"""Best-effort IP geolocation.

An optional external provider (ipapi.co) is consulted first for public
addresses, then an optional local GeoLite2 database. Either may be missing;
the result is then simply empty.
"""

from __future__ import annotations

import ipaddress
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import geoip2.database
import geoip2.errors
import requests
from pydantic import BaseModel

logger = logging.getLogger(__name__)

IPAPI_URL = "https://ipapi.co/{ip}/json/"


class Location(BaseModel):
    city: str = ""
    region: str = ""
    country: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return bool(self.latitude) and bool(self.longitude)


def is_public_address(ip: str) -> bool:
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return address.is_global


def _merge(primary: Location, fallback: Location) -> Location:
    return Location(
        city=primary.city or fallback.city,
        region=primary.region or fallback.region,
        country=primary.country or fallback.country,
        latitude=primary.latitude or fallback.latitude,
        longitude=primary.longitude or fallback.longitude,
    )


class GeoResolver:
    def __init__(
        self,
        *,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        database_path: Optional[Path] = None,
        cache_ttl_seconds: int = 300,
        timeout_seconds: float = 3.0,
        session: Optional[requests.Session] = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.provider = provider
        self.api_key = api_key
        self.database_path = database_path
        self.cache_ttl_seconds = cache_ttl_seconds
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._now = now or time.monotonic
        self._cache: Dict[str, Tuple[float, Location]] = {}
        self._cache_lock = threading.Lock()
        self._reader: Optional[geoip2.database.Reader] = None

    @property
    def external_enabled(self) -> bool:
        return bool(self.provider and self.api_key)

    def _get_reader(self) -> Optional[geoip2.database.Reader]:
        if self._reader is None and self.database_path and Path(self.database_path).exists():
            self._reader = geoip2.database.Reader(str(self.database_path))
        return self._reader

    def _cached(self, key: str) -> Optional[Location]:
        with self._cache_lock:
            entry = self._cache.get(key)
        if entry and (self._now() - entry[0]) < self.cache_ttl_seconds:
            return entry[1]
        return None

    def _lookup_external(self, ip: str) -> Optional[Location]:
        key = f"{self.provider}:{ip}"
        cached = self._cached(key)
        if cached is not None:
            return cached
        if self.provider != "ipapi":
            logger.warning(f"Unsupported geo provider {self.provider!r}")
            return None
        try:
            resp = self._session.get(
                IPAPI_URL.format(ip=ip),
                params={"key": self.api_key},
                timeout=self.timeout_seconds,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning(f"External geo lookup failed: {exc}")
            return None
        location = Location(
            city=payload.get("city") or "",
            region=payload.get("region") or payload.get("region_code") or "",
            country=payload.get("country") or payload.get("country_name") or "",
            latitude=payload.get("latitude") or payload.get("lat"),
            longitude=payload.get("longitude") or payload.get("lon"),
        )
        with self._cache_lock:
            self._cache[key] = (self._now(), location)
        return location

    def _lookup_database(self, ip: str) -> Location:
        reader = self._get_reader()
        if reader is None:
            return Location()
        try:
            resp = reader.city(ip)
        except (geoip2.errors.AddressNotFoundError, ValueError):
            return Location()
        subdivision = resp.subdivisions.most_specific
        return Location(
            city=resp.city.name or "",
            region=subdivision.iso_code or "",
            country=resp.country.iso_code or "",
            latitude=resp.location.latitude,
            longitude=resp.location.longitude,
        )

    def lookup(self, ip: str) -> Location:
        location = Location()
        if self.external_enabled and is_public_address(ip):
            location = self._lookup_external(ip) or location
        if not location.has_coordinates:
            location = _merge(location, self._lookup_database(ip))
        return location

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        self._session.close()
