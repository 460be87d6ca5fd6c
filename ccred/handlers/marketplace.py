"""
Marketplace handler: listing credits for resale, browsing, price statistics.
"""

import logging
from typing import List, Optional

from ccred.core.constants import LISTING_ID_PREFIX, PRICE_HIGH_LOWER_BOUND, PRICE_LOW_UPPER_BOUND
from ccred.core.exceptions import StateConflictError, ValidationError
from ccred.db.store import Records
from ccred.handlers.audit import record_audit
from ccred.handlers.credits import OPEN_CREDIT_STATES
from ccred.models.common import ListingTransaction
from ccred.models.listing import (
    ListingCreate,
    ListingStatus,
    ListingUpdate,
    MarketplaceListing,
    PriceRange,
    PriceStats,
    TransactionCreate,
)
from ccred.models.project import ProjectCategory
from ccred.utils.ids import new_id
from ccred.utils.time import utc_now

logger = logging.getLogger(__name__)


async def create_listing(
    records: Records,
    credit_id: str,
    listing_data: ListingCreate
) -> MarketplaceListing:
    """
    List a credit for sale.

    The whole credit amount is offered: available_quantity starts at the
    credit's credits_amount.
    """
    credit = await records.credits.get(credit_id)
    if credit.status not in OPEN_CREDIT_STATES:
        raise StateConflictError(
            f"Credit is {credit.status.value} and cannot be listed",
            details={"credit_id": credit_id}
        )
    if listing_data.price <= 0:
        raise ValidationError("price: Valid price is required")
    if listing_data.seller_id:
        await records.stakeholders.get(listing_data.seller_id)

    listing = MarketplaceListing.model_validate({
        **listing_data.model_dump(mode="json"),
        "id": new_id(LISTING_ID_PREFIX),
        "credit_id": credit.id,
        "available_quantity": credit.credits_amount,
        "status": ListingStatus.ACTIVE,
    })
    listing = await records.listings.insert(listing)

    await record_audit(
        records,
        action="listing_created",
        entity_type="marketplace_listing",
        entity_id=listing.id,
        payload={"credit_id": credit.id, "price": listing.price, "quantity": listing.available_quantity}
    )
    logger.info("Listed credit %s as %s at %.2f %s", credit.id, listing.id, listing.price, listing.currency)
    return listing


async def update_listing(
    records: Records,
    listing_id: str,
    changes: ListingUpdate
) -> MarketplaceListing:
    """
    Change an active listing.

    sold, expired and cancelled listings are closed and refuse any change.
    """
    listing = await records.listings.get(listing_id)
    if listing.status != ListingStatus.ACTIVE:
        raise StateConflictError(
            f"Listing is {listing.status.value} and can no longer change",
            details={"listing_id": listing_id}
        )
    return await records.listings.update(
        listing_id,
        changes.model_dump(mode="json", exclude_unset=True),
        expected={"status": ListingStatus.ACTIVE}
    )


async def _listing_category(records: Records, listing: MarketplaceListing) -> Optional[ProjectCategory]:
    """Category of the project behind a listing's credit, if both still exist."""
    credit = await records.credits.find(listing.credit_id)
    if credit is None:
        return None
    project = await records.projects.find(credit.project_id)
    return project.category if project else None


async def browse_listings(
    records: Records,
    category: Optional[ProjectCategory] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None
) -> List[MarketplaceListing]:
    """Active listings, optionally narrowed by project category and an inclusive price range."""
    predicates = [MarketplaceListing.status == ListingStatus.ACTIVE]
    if min_price is not None:
        predicates.append(MarketplaceListing.price >= min_price)
    if max_price is not None:
        predicates.append(MarketplaceListing.price <= max_price)

    listings = await records.listings.list(*predicates, order_by=MarketplaceListing.listed_at)
    if category is None:
        return listings

    return [
        listing for listing in listings
        if await _listing_category(records, listing) == category
    ]


def summarize_prices(prices: List[float]) -> PriceStats:
    """Mean/min/max and the low/medium/high histogram of a set of prices."""
    if not prices:
        return PriceStats(
            average_price=0,
            min_price=0,
            max_price=0,
            total_listings=0,
            price_range=PriceRange(low=0, medium=0, high=0)
        )

    return PriceStats(
        average_price=sum(prices) / len(prices),
        min_price=min(prices),
        max_price=max(prices),
        total_listings=len(prices),
        price_range=PriceRange(
            low=sum(1 for p in prices if p < PRICE_LOW_UPPER_BOUND),
            medium=sum(1 for p in prices if PRICE_LOW_UPPER_BOUND <= p < PRICE_HIGH_LOWER_BOUND),
            high=sum(1 for p in prices if p >= PRICE_HIGH_LOWER_BOUND)
        )
    )


async def get_price_stats(records: Records) -> PriceStats:
    """Price statistics over all active listings."""
    listings = await records.listings.list(MarketplaceListing.status == ListingStatus.ACTIVE)
    return summarize_prices([listing.price for listing in listings])


async def record_transaction(
    records: Records,
    listing_id: str,
    order: TransactionCreate
) -> MarketplaceListing:
    """
    Append a pending purchase to a listing's transaction log.

    The order is checked against the listing's minimum and available
    quantities. available_quantity itself is left unchanged; settlement
    happens outside the registry.
    """
    listing = await records.listings.get(listing_id)
    if listing.status != ListingStatus.ACTIVE:
        raise StateConflictError(
            f"Listing is {listing.status.value}",
            details={"listing_id": listing_id}
        )
    await records.stakeholders.get(order.buyer_id)

    if order.quantity < listing.minimum_quantity:
        raise ValidationError(f"quantity: below the minimum of {listing.minimum_quantity:g}")
    if order.quantity > listing.available_quantity:
        raise ValidationError(f"quantity: only {listing.available_quantity:g} available")

    entry = ListingTransaction(
        buyer_id=order.buyer_id,
        quantity=order.quantity,
        price=order.price or listing.price,
        transaction_date=utc_now()
    )
    updated = await records.listings.update(
        listing.id,
        {"transactions": [*listing.transactions, entry.model_dump(mode="json")]}
    )

    await record_audit(
        records,
        action="listing_transaction_recorded",
        entity_type="marketplace_listing",
        entity_id=listing.id,
        payload=entry.model_dump(mode="json")
    )
    return updated
