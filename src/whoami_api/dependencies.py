"""Request-scoped dependency helpers."""

from fastapi import Depends, Request

from whoami_api.config import Settings
from whoami_api.identity import client_id_from_request
from whoami_api.profile.geo import GeoResolver
from whoami_api.rate_limit import check_rate_limit
from whoami_api.visits.service import VisitAccounting


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_accounting(request: Request) -> VisitAccounting:
    return request.app.state.accounting


def get_geo_resolver(request: Request) -> GeoResolver:
    return request.app.state.geo


def get_client_id(request: Request, settings: Settings = Depends(get_settings)) -> str:
    return client_id_from_request(request, settings.trust_proxy)


async def enforce_rate_limit(request: Request, client_id: str = Depends(get_client_id)) -> None:
    check_rate_limit(request.app.state.rate_limiter, client_id)
