"""Pydantic models for the whoami response."""

from pydantic import BaseModel

from whoami_api.profile.geo import Location
from whoami_api.visits.schemas import VisitCountsModel


class WhoAmIResponse(BaseModel):
    ip: str
    browser: str
    os: str
    device: str
    location: Location
    visits: VisitCountsModel
