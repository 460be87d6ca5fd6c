"""
Audit log model - append-only tamper-evident audit trail.
"""

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from ccred.utils.time import utc_now


class AuditLogBase(SQLModel):
    """Base audit log schema."""
    payload_hash: str = Field(..., description="SHA-256 hash of the audited payload")
    action: str = Field(..., description="Action type (e.g., 'credit_issued', 'verification_approved')")
    entity_type: str = Field(..., index=True, description="Entity type (e.g., 'carbon_credit', 'verification_submission')")
    entity_id: Optional[str] = Field(default=None, index=True, description="ID of the entity")
    extra_data: Optional[str] = Field(
        default=None,
        description="JSON string of additional metadata"
    )


class AuditLog(AuditLogBase, table=True):
    """Audit log database table - append-only."""
    __tablename__ = "audit_log"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)


class AuditLogRead(AuditLogBase):
    """Schema for reading an audit log entry."""
    id: int
    created_at: datetime
