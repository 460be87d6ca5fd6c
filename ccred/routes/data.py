"""
Field-data upload endpoints.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import List, Optional

from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.common import Envelope, ListEnvelope, MessageResponse
from ccred.models.upload import (
    DataType,
    DataUploadRead,
    DataValidationRequest,
    DataValidationResult,
    UploadStatusUpdate,
)
from ccred.models.verification import SubmitForVerification, VerificationSubmissionRead
from ccred.handlers.files import FileStore, get_file_store
from ccred.handlers.uploads import (
    create_upload,
    get_uploads,
    supported_data_types,
    update_upload_status,
    validate_upload_data,
)
from ccred.handlers.workflow import submit_for_verification

router = APIRouter(prefix="/data", tags=["data"])


@router.post("/upload", response_model=Envelope[DataUploadRead], status_code=status.HTTP_201_CREATED)
async def upload_data_endpoint(
    project_id: str = Form(...),
    data_type: DataType = Form(...),
    metadata: Optional[str] = Form(None),
    uploaded_by: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    records: Records = Depends(get_records),
    file_store: FileStore = Depends(get_file_store)
):
    """
    Upload field data for a project.

    Multipart form fields:
    - project_id, data_type (required)
    - metadata: JSON object, e.g. {"collection_date": "2024-05-01", "equipment": "DJI M300"}
    - files: any number of file parts
    """
    upload = await create_upload(
        records,
        file_store,
        project_id=project_id,
        data_type=data_type,
        files=files,
        metadata=metadata,
        uploaded_by=uploaded_by
    )
    return {"data": upload}


@router.get("/uploads", response_model=ListEnvelope[DataUploadRead])
async def list_uploads_endpoint(
    project_id: Optional[str] = None,
    records: Records = Depends(get_records)
):
    uploads = await get_uploads(records, project_id)
    return {"data": uploads, "total": len(uploads)}


@router.get("/uploads/{upload_id}", response_model=Envelope[DataUploadRead])
async def get_upload_endpoint(
    upload_id: str,
    records: Records = Depends(get_records)
):
    return {"data": await records.uploads.get(upload_id)}


@router.patch("/uploads/{upload_id}/status", response_model=Envelope[DataUploadRead])
async def update_upload_status_endpoint(
    upload_id: str,
    update: UploadStatusUpdate,
    records: Records = Depends(get_records)
):
    """Mark an upload as processing, validated or rejected."""
    return {"data": await update_upload_status(records, upload_id, update.status)}


@router.delete("/uploads/{upload_id}", response_model=MessageResponse)
async def delete_upload_endpoint(
    upload_id: str,
    records: Records = Depends(get_records)
):
    await records.uploads.delete(upload_id)
    return {"message": "Upload deleted successfully"}


@router.post("/uploads/{upload_id}/verify", response_model=Envelope[VerificationSubmissionRead])
async def submit_upload_endpoint(
    upload_id: str,
    body: Optional[SubmitForVerification] = None,
    records: Records = Depends(get_records)
):
    """Submit an upload for third-party verification."""
    submitted_by = body.submitted_by if body else None
    return {"data": await submit_for_verification(records, upload_id, submitted_by)}


@router.get("/types", response_model=Envelope[List[str]])
async def data_types_endpoint():
    """Supported upload data types."""
    return {"data": supported_data_types()}


@router.post("/validate", response_model=DataValidationResult)
async def validate_data_endpoint(request: DataValidationRequest):
    """Check a data type and metadata before uploading."""
    return validate_upload_data(request.data_type, request.metadata)
