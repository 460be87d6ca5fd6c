"""
Stakeholder model - organisations and people participating in projects.
"""

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from ccred.models.common import StakeholderContact
from ccred.utils.time import utc_now


class StakeholderCategory(str, Enum):
    PROJECT_DEVELOPER = "project_developer"
    VERIFIER = "verifier"
    GOVERNMENT = "government"
    NGO = "ngo"
    RESEARCH_INSTITUTION = "research_institution"
    LOCAL_COMMUNITY = "local_community"
    INVESTOR = "investor"
    BUYER = "buyer"
    CONSULTANT = "consultant"


class StakeholderStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class StakeholderBase(SQLModel):
    """Base stakeholder schema."""
    name: str = Field(..., min_length=1)
    category: StakeholderCategory = Field(..., index=True)
    role: Optional[str] = Field(default=None, max_length=200)
    status: StakeholderStatus = Field(default=StakeholderStatus.ACTIVE, index=True)


class Stakeholder(StakeholderBase, table=True):
    """Stakeholder database table."""
    __tablename__ = "stakeholders"

    id: str = Field(primary_key=True)
    contact: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    projects: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class StakeholderCreate(StakeholderBase):
    contact: Optional[StakeholderContact] = None
    projects: List[str] = Field(default_factory=list, description="Projects to link on registration")


class StakeholderUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[StakeholderCategory] = None
    role: Optional[str] = Field(default=None, max_length=200)
    status: Optional[StakeholderStatus] = None
    contact: Optional[StakeholderContact] = None


class StakeholderRead(StakeholderBase):
    id: str
    contact: Optional[StakeholderContact] = None
    projects: List[str]
    created_at: datetime
    updated_at: datetime


class StakeholderMessage(SQLModel):
    """Message addressed to a stakeholder."""
    message: str = Field(..., min_length=1)
    subject: Optional[str] = None


class ConnectionRequest(SQLModel):
    stakeholder_id: str
    status: str = "connection_requested"
    requested_at: datetime


class SentMessage(SQLModel):
    stakeholder_id: str
    subject: Optional[str] = None
    message: str
    sent_at: datetime
