"""
Marketplace listing model - resale offers for issued credits.
"""

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from enum import Enum

from ccred.core.constants import DEFAULT_CURRENCY, DEFAULT_MINIMUM_QUANTITY
from ccred.models.common import ListingTransaction
from ccred.utils.time import utc_now


class ListingStatus(str, Enum):
    """Listing lifecycle. sold, expired and cancelled are terminal."""
    ACTIVE = "active"
    SOLD = "sold"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class MarketplaceListingBase(SQLModel):
    """Base listing schema."""
    credit_id: str = Field(..., index=True)
    seller_id: Optional[str] = Field(default=None, index=True)
    price: float = Field(..., gt=0)
    currency: str = Field(default=DEFAULT_CURRENCY)
    minimum_quantity: float = Field(default=DEFAULT_MINIMUM_QUANTITY, ge=1)
    available_quantity: float = Field(..., ge=0)
    status: ListingStatus = Field(default=ListingStatus.ACTIVE, index=True)
    listed_at: datetime = Field(default_factory=utc_now)
    expiry_date: Optional[date] = None
    description: Optional[str] = None


class MarketplaceListing(MarketplaceListingBase, table=True):
    """Marketplace listing database table."""
    __tablename__ = "marketplace_listings"

    id: str = Field(primary_key=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    transactions: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ListingCreate(SQLModel):
    """Schema for listing a credit for sale."""
    price: float = Field(..., gt=0)
    currency: str = Field(default=DEFAULT_CURRENCY)
    minimum_quantity: float = Field(default=DEFAULT_MINIMUM_QUANTITY, ge=1)
    expiry_date: Optional[date] = None
    description: Optional[str] = None
    seller_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class ListingUpdate(SQLModel):
    price: Optional[float] = Field(default=None, gt=0)
    minimum_quantity: Optional[float] = Field(default=None, ge=1)
    expiry_date: Optional[date] = None
    description: Optional[str] = None
    status: Optional[ListingStatus] = None
    tags: Optional[List[str]] = None


class TransactionCreate(SQLModel):
    """A buyer's order against a listing."""
    buyer_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    price: Optional[float] = Field(default=None, gt=0)


class MarketplaceListingRead(MarketplaceListingBase):
    id: str
    tags: List[str]
    transactions: List[ListingTransaction]
    created_at: datetime
    updated_at: datetime


class PriceRange(SQLModel):
    low: int
    medium: int
    high: int


class PriceStats(SQLModel):
    average_price: float
    min_price: float
    max_price: float
    total_listings: int
    price_range: PriceRange
