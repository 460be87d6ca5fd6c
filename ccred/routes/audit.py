"""
Audit trail endpoints.
"""

from fastapi import APIRouter, Depends
from typing import Optional

from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.audit import AuditLogRead
from ccred.models.common import ListEnvelope
from ccred.handlers.audit import get_audit_entries

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=ListEnvelope[AuditLogRead])
async def audit_log_endpoint(
    entity_id: Optional[str] = None,
    entity_type: Optional[str] = None,
    records: Records = Depends(get_records)
):
    """Append-only audit trail, oldest first."""
    entries = await get_audit_entries(records, entity_id, entity_type)
    return {"data": entries, "total": len(entries)}
