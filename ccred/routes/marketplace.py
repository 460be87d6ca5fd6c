"""
Marketplace endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.common import Envelope, ListEnvelope, MessageResponse
from ccred.models.listing import (
    ListingCreate,
    ListingUpdate,
    MarketplaceListingRead,
    PriceStats,
    TransactionCreate,
)
from ccred.models.project import ProjectCategory
from ccred.handlers.marketplace import (
    browse_listings,
    create_listing,
    get_price_stats,
    record_transaction,
    update_listing,
)

router = APIRouter(prefix="/marketplace", tags=["marketplace"])


@router.get("/credits", response_model=ListEnvelope[MarketplaceListingRead])
async def browse_endpoint(
    category: Optional[ProjectCategory] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    records: Records = Depends(get_records)
):
    """Active listings, filtered by project category and inclusive price bounds."""
    listings = await browse_listings(records, category, min_price, max_price)
    return {"data": listings, "total": len(listings)}


@router.post(
    "/credits/{credit_id}/list",
    response_model=Envelope[MarketplaceListingRead],
    status_code=status.HTTP_201_CREATED
)
async def list_credit_endpoint(
    credit_id: str,
    listing: ListingCreate,
    records: Records = Depends(get_records)
):
    """Offer a credit for sale."""
    return {"data": await create_listing(records, credit_id, listing)}


@router.get("/prices", response_model=Envelope[PriceStats])
async def price_stats_endpoint(
    records: Records = Depends(get_records)
):
    """
    Price statistics over active listings.

    Buckets: low < 10, medium 10-20, high >= 20.
    """
    return {"data": await get_price_stats(records)}


@router.get("/listings/{listing_id}", response_model=Envelope[MarketplaceListingRead])
async def get_listing_endpoint(
    listing_id: str,
    records: Records = Depends(get_records)
):
    return {"data": await records.listings.get(listing_id)}


@router.put("/listings/{listing_id}", response_model=Envelope[MarketplaceListingRead])
async def update_listing_endpoint(
    listing_id: str,
    changes: ListingUpdate,
    records: Records = Depends(get_records)
):
    """Change price, minimum quantity, expiry, description or status of an active listing."""
    return {"data": await update_listing(records, listing_id, changes)}


@router.delete("/listings/{listing_id}", response_model=MessageResponse)
async def delete_listing_endpoint(
    listing_id: str,
    records: Records = Depends(get_records)
):
    await records.listings.delete(listing_id)
    return {"message": "Listing deleted successfully"}


@router.post("/listings/{listing_id}/transactions", response_model=Envelope[MarketplaceListingRead])
async def record_transaction_endpoint(
    listing_id: str,
    order: TransactionCreate,
    records: Records = Depends(get_records)
):
    """Record a buyer's order against a listing."""
    return {"data": await record_transaction(records, listing_id, order)}
