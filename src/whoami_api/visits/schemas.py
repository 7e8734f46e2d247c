"""Pydantic models for visit responses."""

from pydantic import BaseModel, ConfigDict, Field

from whoami_api.visits.ledger import VisitCounts, VisitSnapshot


class VisitCountsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    unique: int
    your_visits: int = Field(alias="yourVisits")

    @classmethod
    def from_counts(cls, counts: VisitCounts) -> "VisitCountsModel":
        return cls(total=counts.total, unique=counts.unique, your_visits=counts.your_visits)


class VisitSnapshotModel(BaseModel):
    total: int
    unique: int

    @classmethod
    def from_snapshot(cls, snapshot: VisitSnapshot) -> "VisitSnapshotModel":
        return cls(total=snapshot.total, unique=snapshot.unique)
