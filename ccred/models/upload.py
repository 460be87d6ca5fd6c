"""
Data upload model - field, sensor and imagery data attached to a project.
"""

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from ccred.models.common import UploadedFile, UploadMetadata
from ccred.utils.time import utc_now


class DataType(str, Enum):
    """Supported categories of uploaded field data."""
    FIELD_SURVEY = "field_survey"
    DRONE_IMAGERY = "drone_imagery"
    SENSOR_DATA = "sensor_data"
    SATELLITE_DATA = "satellite_data"
    SOIL_SAMPLES = "soil_samples"
    WATER_QUALITY = "water_quality"
    BIODIVERSITY_SURVEY = "biodiversity_survey"
    CARBON_MEASUREMENT = "carbon_measurement"
    FOREST_INVENTORY = "forest_inventory"
    REMOTE_SENSING = "remote_sensing"


class UploadStatus(str, Enum):
    """Upload lifecycle: uploaded -> processing -> validated/rejected -> submitted_for_verification."""
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    VALIDATED = "validated"
    REJECTED = "rejected"
    SUBMITTED_FOR_VERIFICATION = "submitted_for_verification"


class DataUploadBase(SQLModel):
    """Base upload schema."""
    project_id: str = Field(..., index=True)
    data_type: DataType = Field(..., index=True)
    status: UploadStatus = Field(default=UploadStatus.UPLOADED, index=True)
    uploaded_by: Optional[str] = None
    verification_id: Optional[str] = Field(
        default=None,
        description="Submission created when the upload was sent for verification"
    )


class DataUpload(DataUploadBase, table=True):
    """Data upload database table."""
    __tablename__ = "data_uploads"

    id: str = Field(primary_key=True)
    files: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    field_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class DataUploadRead(DataUploadBase):
    id: str
    files: List[UploadedFile]
    field_metadata: UploadMetadata
    created_at: datetime
    updated_at: datetime


class UploadStatusUpdate(SQLModel):
    status: UploadStatus


class DataValidationRequest(SQLModel):
    """Pre-flight check of an upload's data type and metadata."""
    data_type: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class DataValidationResult(SQLModel):
    success: bool
    valid: bool
    errors: List[str]
