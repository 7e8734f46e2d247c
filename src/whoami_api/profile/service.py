"""Client profile composition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from whoami_api.profile.geo import GeoResolver, Location
from whoami_api.profile.user_agent import describe_user_agent


@dataclass
class ClientProfile:
    ip: str
    browser: str
    os: str
    device: str
    location: Location


def describe_client(client_id: str, user_agent: Optional[str], geo: GeoResolver) -> ClientProfile:
    info = describe_user_agent(user_agent)
    return ClientProfile(
        ip=client_id,
        browser=info.browser,
        os=info.os,
        device=info.device,
        location=geo.lookup(client_id),
    )
