"""
Audit trail handler.
"""

import json
from typing import Any, Dict, List, Optional

from ccred.db.store import Records
from ccred.models.audit import AuditLog
from ccred.utils.hashing import hash_payload


async def record_audit(
    records: Records,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """Append an audit entry hashing ``payload``."""
    audit = AuditLog(
        payload_hash=hash_payload(payload),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        extra_data=json.dumps(extra, default=str) if extra else None
    )
    return await records.audit.insert(audit)


async def get_audit_entries(
    records: Records,
    entity_id: Optional[str] = None,
    entity_type: Optional[str] = None
) -> List[AuditLog]:
    """Audit entries, oldest first, optionally narrowed to one entity."""
    predicates = []
    if entity_id:
        predicates.append(AuditLog.entity_id == entity_id)
    if entity_type:
        predicates.append(AuditLog.entity_type == entity_type)
    return await records.audit.list(*predicates, order_by=AuditLog.id)
