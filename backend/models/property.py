"""Pydantic models for the property / space / rent roll hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Rent is kept exact in memory but rendered as a JSON number for clients.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _current_year() -> int:
    return datetime.now().year


class _Entity(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TransportationInfo(_Entity):
    type: str = Field(..., alias="Type")
    line: Optional[str] = Field(None, alias="Line")
    station: Optional[str] = Field(None, alias="Station")
    distance: str = Field(..., alias="Distance")


class RentRoll(_Entity):
    month: str = Field(..., alias="Month")
    year: int = Field(default_factory=_current_year, alias="year")
    rent: Money = Field(..., ge=0, alias="Rent")


class Space(_Entity):
    id: str = Field(..., alias="SpaceId")
    name: str = Field(..., alias="SpaceName")
    type: Optional[str] = Field(None, alias="type")
    size: Optional[int] = Field(None, ge=0, alias="size")
    rent_roll: List[RentRoll] = Field(default_factory=list, alias="RentRoll")

    @property
    def latest_rent(self) -> Optional[Decimal]:
        """Rent of the last rent roll entry; source order is chronological."""

        if not self.rent_roll:
            return None
        return self.rent_roll[-1].rent


class Property(_Entity):
    id: str = Field(..., alias="PropertyId")
    name: str = Field(..., alias="PropertyName")
    address: Optional[str] = Field(None, alias="address")
    features: List[str] = Field(default_factory=list, alias="Features")
    highlights: List[str] = Field(default_factory=list, alias="Highlights")
    transportation: List[TransportationInfo] = Field(default_factory=list, alias="Transportation")
    spaces: List[Space] = Field(default_factory=list, alias="Spaces")


DataSource = Literal["blob", "fallback"]


@dataclass(frozen=True)
class ResultSet:
    """One complete fetch of the blob, as stored in and evicted from the cache."""

    properties: List[Property]
    cached_at: Optional[float] = None
    size_bytes: int = 0
    source: DataSource = "blob"
    fallback_reason: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PropertiesResponse(BaseModel):
    properties: List[Property]
    total: int
    source: DataSource = "blob"
    fallback_reason: Optional[str] = None


class BlobHealth(BaseModel):
    healthy: bool
    exists: bool
    size_bytes: Optional[int] = None
    max_size_bytes: int
    reason: Optional[str] = None


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"]
    blob: BlobHealth


class ErrorResponse(BaseModel):
    title: str
    status: int
    detail: str
    trace_id: Optional[str] = Field(None, alias="traceId")
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def not_found(cls, detail: str, trace_id: Optional[str] = None) -> "ErrorResponse":
        return cls(title="Not Found", status=404, detail=detail, trace_id=trace_id)

    @classmethod
    def internal_server_error(cls, detail: str, trace_id: Optional[str] = None) -> "ErrorResponse":
        return cls(title="Internal Server Error", status=500, detail=detail, trace_id=trace_id)
