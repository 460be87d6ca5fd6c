"""
Carbon credit model - issued credits gated on an approved verification.
"""

from sqlmodel import SQLModel, Field
from pydantic import field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from ccred.utils.time import utc_now


class CreditStatus(str, Enum):
    """Carbon credit status lifecycle. retired and cancelled are terminal."""
    ISSUED = "issued"
    ACTIVE = "active"
    RETIRED = "retired"
    CANCELLED = "cancelled"


class CarbonCreditBase(SQLModel):
    """Base carbon credit schema."""
    project_id: str = Field(..., index=True)
    verification_id: str = Field(..., index=True)
    credits_amount: float = Field(..., gt=0, description="Credits issued, 1 credit = 1 tCO2e")
    methodology: str
    vintage: str = Field(..., description="Year the emission reduction occurred")
    status: CreditStatus = Field(default=CreditStatus.ISSUED, index=True)
    description: Optional[str] = None
    retired_by: Optional[str] = None
    retired_at: Optional[datetime] = None
    retirement_reason: Optional[str] = None


class CarbonCredit(CarbonCreditBase, table=True):
    """Carbon credit database table."""
    __tablename__ = "carbon_credits"

    id: str = Field(primary_key=True)
    serial_number: str = Field(..., unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class CarbonCreditIssue(SQLModel):
    """Schema for issuing a credit from an approved verification."""
    project_id: str = Field(..., min_length=1)
    verification_id: str = Field(..., min_length=1)
    credits_amount: float = Field(..., gt=0)
    methodology: Optional[str] = None
    vintage: Optional[str] = None
    description: Optional[str] = None

    @field_validator("vintage")
    @classmethod
    def vintage_is_year(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not (len(value) == 4 and value.isdigit()):
            raise ValueError("vintage must be a four-digit year")
        return value


class CarbonCreditRetire(SQLModel):
    retired_by: str = Field(..., min_length=1)
    reason: Optional[str] = None


class CarbonCreditRead(CarbonCreditBase):
    """Schema for reading a carbon credit."""
    id: str
    serial_number: str
    created_at: datetime
    updated_at: datetime


class CreditCertificate(SQLModel):
    """Descriptive certificate record; the document itself is rendered elsewhere."""
    credit_id: str
    serial_number: str
    project_name: str
    credits_amount: float
    methodology: str
    vintage: str
    issued_date: datetime
    certificate_url: str


class ProjectCredits(SQLModel):
    project_id: str
    project_name: str
    credits: List[CarbonCreditRead]


class Portfolio(SQLModel):
    total_credits: float
    active_credits: int
    credits_by_project: List[ProjectCredits]
