"""
Verification submission model - a reviewable record pairing uploaded
field data with a reviewer decision.
"""

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from ccred.utils.time import utc_now


class VerificationStatus(str, Enum):
    """
    Verification lifecycle.

    pending -> under_review -> approved | rejected | more_data_requested.
    An approved submission becomes credit_issued once a credit is minted
    from it.
    """
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    MORE_DATA_REQUESTED = "more_data_requested"
    CREDIT_ISSUED = "credit_issued"


class VerificationSubmissionBase(SQLModel):
    """Base verification submission schema."""
    upload_id: str = Field(..., index=True)
    project_id: str = Field(..., index=True)
    data_type: str
    submitted_by: Optional[str] = None
    status: VerificationStatus = Field(default=VerificationStatus.PENDING, index=True)
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: datetime = Field(default_factory=utc_now)
    credits_generated: float = Field(default=0, ge=0)
    quality_score: Optional[float] = Field(default=None, ge=0, le=100)
    comments: Optional[str] = None
    reason: Optional[str] = Field(default=None, description="Rejection reason")
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    requested_at: Optional[datetime] = None


class VerificationSubmission(VerificationSubmissionBase, table=True):
    """Verification submission database table."""
    __tablename__ = "verification_submissions"

    id: str = Field(primary_key=True)
    required_actions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    requested_data: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    field_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class VerificationSubmissionRead(VerificationSubmissionBase):
    id: str
    required_actions: List[str]
    requested_data: List[str]
    field_metadata: Dict[str, Any]
    created_at: datetime
    updated_at: datetime


class SubmitForVerification(SQLModel):
    submitted_by: Optional[str] = None


class ReviewStart(SQLModel):
    reviewed_by: Optional[str] = None


class ApprovalDecision(SQLModel):
    credits_generated: float = Field(default=0, ge=0)
    quality_score: Optional[float] = Field(default=None, ge=0, le=100)
    comments: Optional[str] = None
    reviewed_by: Optional[str] = None


class RejectionDecision(SQLModel):
    reason: str = Field(..., min_length=1)
    comments: Optional[str] = None
    required_actions: List[str] = Field(default_factory=list)
    reviewed_by: Optional[str] = None


class MoreDataRequest(SQLModel):
    requested_data: List[str] = Field(default_factory=list)
    comments: Optional[str] = None
    reviewed_by: Optional[str] = None
