"""Whoami route."""

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from whoami_api.dependencies import (
    enforce_rate_limit,
    get_accounting,
    get_client_id,
    get_geo_resolver,
)
from whoami_api.exceptions import AccountingFailed
from whoami_api.profile.geo import GeoResolver
from whoami_api.profile.schemas import WhoAmIResponse
from whoami_api.profile.service import describe_client
from whoami_api.visits.schemas import VisitCountsModel
from whoami_api.visits.service import VisitAccounting


router = APIRouter(tags=["whoami"])


@router.get("/whoami", response_model=WhoAmIResponse)
async def whoami(
    request: Request,
    client_id: str = Depends(get_client_id),
    accounting: VisitAccounting = Depends(get_accounting),
    geo: GeoResolver = Depends(get_geo_resolver),
    _: None = Depends(enforce_rate_limit),
):
    profile = await run_in_threadpool(
        describe_client, client_id, request.headers.get("user-agent"), geo
    )
    outcome = await accounting.record(client_id)
    if not outcome.ok:
        raise AccountingFailed(outcome.error)

    return WhoAmIResponse(
        ip=profile.ip,
        browser=profile.browser,
        os=profile.os,
        device=profile.device,
        location=profile.location,
        visits=VisitCountsModel.from_counts(outcome.counts),
    )
