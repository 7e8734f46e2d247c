"""Visit counter routes."""

from fastapi import APIRouter, Depends

from whoami_api.dependencies import enforce_rate_limit, get_accounting
from whoami_api.exceptions import AccountingFailed
from whoami_api.visits.constants import READ_FAILED_MESSAGE
from whoami_api.visits.exceptions import StoreError
from whoami_api.visits.schemas import VisitSnapshotModel
from whoami_api.visits.service import VisitAccounting


router = APIRouter(prefix="/visits", tags=["visits"])


@router.get("", response_model=VisitSnapshotModel)
async def read_visits(
    accounting: VisitAccounting = Depends(get_accounting),
    _: None = Depends(enforce_rate_limit),
):
    try:
        snapshot = await accounting.snapshot()
    except StoreError as exc:
        raise AccountingFailed(READ_FAILED_MESSAGE) from exc
    return VisitSnapshotModel.from_snapshot(snapshot)
