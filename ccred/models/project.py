"""
Project model - the root aggregate of the registry.
"""

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from enum import Enum

from ccred.core.config import get_settings
from ccred.models.common import Budget, ProjectLocation
from ccred.utils.time import utc_now


class ProjectCategory(str, Enum):
    """Ecological and energy project categories."""
    REFORESTATION = "reforestation"
    AFFORESTATION = "afforestation"
    FOREST_CONSERVATION = "forest_conservation"
    AGROFORESTRY = "agroforestry"
    WETLAND_RESTORATION = "wetland_restoration"
    GRASSLAND_RESTORATION = "grassland_restoration"
    RENEWABLE_ENERGY = "renewable_energy"
    ENERGY_EFFICIENCY = "energy_efficiency"
    METHANE_CAPTURE = "methane_capture"
    SOIL_CARBON = "soil_carbon"
    BLUE_CARBON = "blue_carbon"


class ProjectStatus(str, Enum):
    """Project lifecycle."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class FundingSource(str, Enum):
    GOVERNMENT = "government"
    PRIVATE = "private"
    NGO = "ngo"
    INTERNATIONAL = "international"
    MIXED = "mixed"


class ProjectBase(SQLModel):
    """Base project schema."""
    name: str = Field(..., min_length=1, max_length=200)
    category: ProjectCategory = Field(..., index=True)
    description: Optional[str] = Field(default=None, max_length=1000)
    methodology: str = Field(default_factory=lambda: get_settings().default_methodology)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING, index=True)
    estimated_credits: Optional[float] = Field(default=None, ge=0)
    actual_credits: float = Field(default=0, ge=0)
    funding_source: Optional[FundingSource] = None


class Project(ProjectBase, table=True):
    """Project database table."""
    __tablename__ = "projects"

    id: str = Field(primary_key=True)
    location: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    stakeholders: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    budget: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProjectCreate(ProjectBase):
    """Schema for registering a project."""
    location: ProjectLocation
    stakeholders: List[str] = Field(default_factory=list, description="Stakeholders to link on registration")
    budget: Optional[Budget] = None


class ProjectUpdate(SQLModel):
    """Partial update; only supplied fields are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[ProjectCategory] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    methodology: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ProjectStatus] = None
    estimated_credits: Optional[float] = Field(default=None, ge=0)
    actual_credits: Optional[float] = Field(default=None, ge=0)
    funding_source: Optional[FundingSource] = None
    location: Optional[ProjectLocation] = None
    budget: Optional[Budget] = None


class ProjectRead(ProjectBase):
    """Schema for reading a project."""
    id: str
    location: ProjectLocation
    stakeholders: List[str]
    budget: Optional[Budget] = None
    created_at: datetime
    updated_at: datetime
