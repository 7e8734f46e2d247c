"""Web UI routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from whoami_api.config import Settings
from whoami_api.dependencies import get_accounting, get_settings
from whoami_api.exceptions import AccountingFailed
from whoami_api.visits.constants import READ_FAILED_MESSAGE
from whoami_api.visits.exceptions import StoreError
from whoami_api.visits.service import VisitAccounting
from whoami_api.web.service import render_homepage


router = APIRouter(tags=["web"])


@router.get("/", response_class=HTMLResponse)
async def home(
    settings: Settings = Depends(get_settings),
    accounting: VisitAccounting = Depends(get_accounting),
):
    try:
        snapshot = await accounting.snapshot()
    except StoreError as exc:
        raise AccountingFailed(READ_FAILED_MESSAGE) from exc
    return render_homepage(settings.app_name, snapshot)
