"""
Carbon credit endpoints.
"""

from fastapi import APIRouter, Depends, Request, status
from typing import Optional

from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.common import Envelope, ListEnvelope, MessageResponse
from ccred.models.credit import (
    CarbonCreditIssue,
    CarbonCreditRead,
    CarbonCreditRetire,
    CreditCertificate,
    CreditStatus,
    Portfolio,
)
from ccred.handlers.credits import (
    build_certificate,
    cancel_credit,
    get_credits,
    issue_credit,
    retire_credit,
)
from ccred.handlers.portfolio import get_portfolio

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("", response_model=ListEnvelope[CarbonCreditRead])
async def list_credits_endpoint(
    project_id: Optional[str] = None,
    status: Optional[CreditStatus] = None,
    records: Records = Depends(get_records)
):
    """List credits, optionally by project and status."""
    credits = await get_credits(records, project_id, status)
    return {"data": credits, "total": len(credits)}


@router.post("/generate", response_model=Envelope[CarbonCreditRead], status_code=status.HTTP_201_CREATED)
async def generate_credit_endpoint(
    credit: CarbonCreditIssue,
    records: Records = Depends(get_records)
):
    """
    Issue a carbon credit.

    Requires an existing project and a verification submission in status
    approved; anything else is refused with 400.
    """
    return {"data": await issue_credit(records, credit)}


@router.get("/portfolio", response_model=Envelope[Portfolio])
async def portfolio_endpoint(
    records: Records = Depends(get_records)
):
    """
    Credit portfolio rollup.

    Returns:
        - total_credits (all statuses)
        - active_credits
        - credits_by_project
    """
    return {"data": await get_portfolio(records)}


@router.get("/{credit_id}", response_model=Envelope[CarbonCreditRead])
async def get_credit_endpoint(
    credit_id: str,
    records: Records = Depends(get_records)
):
    return {"data": await records.credits.get(credit_id)}


@router.delete("/{credit_id}", response_model=MessageResponse)
async def delete_credit_endpoint(
    credit_id: str,
    records: Records = Depends(get_records)
):
    await records.credits.delete(credit_id)
    return {"message": "Credit deleted successfully"}


@router.get("/{credit_id}/certificate", response_model=Envelope[CreditCertificate])
async def certificate_endpoint(
    credit_id: str,
    request: Request,
    records: Records = Depends(get_records)
):
    """Certificate record for a credit."""
    return {"data": await build_certificate(records, credit_id, str(request.base_url))}


@router.post("/{credit_id}/retire", response_model=Envelope[CarbonCreditRead])
async def retire_credit_endpoint(
    credit_id: str,
    retirement: CarbonCreditRetire,
    records: Records = Depends(get_records)
):
    """Retire a credit against an emission claim."""
    return {"data": await retire_credit(records, credit_id, retirement.retired_by, retirement.reason)}


@router.post("/{credit_id}/cancel", response_model=Envelope[CarbonCreditRead])
async def cancel_credit_endpoint(
    credit_id: str,
    records: Records = Depends(get_records)
):
    return {"data": await cancel_credit(records, credit_id)}
