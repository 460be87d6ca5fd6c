"""
Shared response envelopes and embedded value objects.

Nested values (locations, contact details, file descriptors, transaction
log entries) are stored in JSON columns on their owning table and typed
with these models on the way in and out of the API.
"""

from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ccred.core.constants import DEFAULT_CURRENCY

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """Successful single-record response."""
    success: bool = True
    data: DataT


class ListEnvelope(BaseModel, Generic[DataT]):
    """Successful collection response."""
    success: bool = True
    data: List[DataT]
    total: int


class MessageResponse(BaseModel):
    """Successful response carrying only a message (e.g. deletes)."""
    success: bool = True
    message: str


class GeoPoint(BaseModel):
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class UploadedFile(BaseModel):
    """Descriptor of a file blob persisted by the file store."""
    name: str
    type: Optional[str] = None
    size: int = Field(..., ge=0)
    path: str
    checksum: Optional[str] = Field(default=None, description="SHA-256 of the file contents")


class UploadMetadata(BaseModel):
    """Field-data collection metadata. Unknown keys are kept verbatim."""
    model_config = ConfigDict(extra="allow")

    collection_date: Optional[date] = None
    location: Optional[GeoPoint] = None
    equipment: Optional[str] = None
    methodology: Optional[str] = None
    quality_score: Optional[float] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = None


class ListingTransaction(BaseModel):
    """One entry in a marketplace listing's transaction log."""
    buyer_id: str
    quantity: float = Field(..., gt=0)
    price: float = Field(..., gt=0)
    transaction_date: datetime
    status: str = "pending"


class ProjectLocation(BaseModel):
    country: str = Field(..., min_length=1)
    state: Optional[str] = None
    district: Optional[str] = None
    coordinates: Optional[GeoPoint] = None
    area: Optional[float] = Field(default=None, ge=0, description="Area in hectares")
    address: Optional[str] = None


class Budget(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0)
    currency: str = DEFAULT_CURRENCY


class StakeholderContact(BaseModel):
    email: str = Field(..., pattern=r"^\S+@\S+\.\S+$")
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
