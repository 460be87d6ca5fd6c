"""
Field-data upload handler.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import pydantic
from fastapi import UploadFile

from ccred.core.constants import UPLOAD_ID_PREFIX
from ccred.core.exceptions import ValidationError
from ccred.db.store import Records
from ccred.handlers.files import FileStore
from ccred.models.common import UploadMetadata
from ccred.models.upload import DataType, DataUpload, DataValidationResult, UploadStatus
from ccred.utils.ids import new_id

logger = logging.getLogger(__name__)


def supported_data_types() -> List[str]:
    """All accepted upload data types."""
    return [data_type.value for data_type in DataType]


def parse_metadata(raw: Optional[str]) -> Dict[str, Any]:
    """
    Parse the free-form JSON metadata sent alongside an upload.

    Known keys are type-checked; unknown keys are kept as sent.
    """
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"metadata: invalid JSON ({e.msg})")
    if not isinstance(payload, dict):
        raise ValidationError("metadata: expected a JSON object")
    try:
        return UploadMetadata.model_validate(payload).model_dump(mode="json", exclude_none=True)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"metadata.{field}: {first['msg']}")


async def create_upload(
    records: Records,
    file_store: FileStore,
    project_id: str,
    data_type: DataType,
    files: Optional[List[UploadFile]] = None,
    metadata: Optional[str] = None,
    uploaded_by: Optional[str] = None
) -> DataUpload:
    """
    Store uploaded files for a project and record the upload.

    The project must exist before any blob is written.
    """
    project = await records.projects.get(project_id)
    field_metadata = parse_metadata(metadata)
    stored = await file_store.save_all(files or [])

    upload = DataUpload(
        id=new_id(UPLOAD_ID_PREFIX),
        project_id=project.id,
        data_type=data_type,
        files=[f.model_dump() for f in stored],
        field_metadata=field_metadata,
        status=UploadStatus.UPLOADED,
        uploaded_by=uploaded_by
    )
    try:
        upload = await records.uploads.insert(upload)
    except Exception:
        await records.rollback()
        await file_store.discard(stored)
        raise
    logger.info("Upload %s for project %s: %d file(s)", upload.id, project.id, len(stored))
    return upload


async def get_uploads(records: Records, project_id: Optional[str] = None) -> List[DataUpload]:
    """Return uploads, optionally for one project."""
    predicates = []
    if project_id:
        predicates.append(DataUpload.project_id == project_id)
    return await records.uploads.list(*predicates, order_by=DataUpload.created_at)


async def update_upload_status(records: Records, upload_id: str, status: UploadStatus) -> DataUpload:
    """Move an upload through processing and validation."""
    if status == UploadStatus.SUBMITTED_FOR_VERIFICATION:
        raise ValidationError("status: uploads are submitted for verification through the verify endpoint")
    return await records.uploads.update(upload_id, {"status": status})


def validate_upload_data(
    data_type: Optional[str],
    metadata: Optional[Dict[str, Any]] = None
) -> DataValidationResult:
    """Pre-flight check of an upload's data type and metadata."""
    if not data_type:
        raise ValidationError("data_type: Data type is required")

    errors = []
    if data_type not in supported_data_types():
        errors.append("Invalid data type")
    if metadata is not None:
        if not metadata.get("collection_date"):
            errors.append("Collection date is required")
        if not metadata.get("location"):
            errors.append("Location is required")

    valid = not errors
    return DataValidationResult(success=valid, valid=valid, errors=errors)
