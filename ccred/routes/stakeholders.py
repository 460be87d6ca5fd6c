"""
Stakeholder endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.common import Envelope, ListEnvelope, MessageResponse
from ccred.models.project import ProjectRead
from ccred.models.stakeholder import (
    ConnectionRequest,
    SentMessage,
    StakeholderCategory,
    StakeholderCreate,
    StakeholderMessage,
    StakeholderRead,
    StakeholderStatus,
    StakeholderUpdate,
)
from ccred.handlers.stakeholders import (
    create_stakeholder,
    get_stakeholder_projects,
    get_stakeholders,
    link_project,
    request_connection,
    send_message,
    update_stakeholder,
)

router = APIRouter(prefix="/stakeholders", tags=["stakeholders"])


@router.get("", response_model=ListEnvelope[StakeholderRead])
async def list_stakeholders_endpoint(
    category: Optional[StakeholderCategory] = None,
    status: Optional[StakeholderStatus] = None,
    records: Records = Depends(get_records)
):
    """List stakeholders, optionally filtered by category and status."""
    stakeholders = await get_stakeholders(records, category, status)
    return {"data": stakeholders, "total": len(stakeholders)}


@router.post("", response_model=Envelope[StakeholderRead], status_code=status.HTTP_201_CREATED)
async def create_stakeholder_endpoint(
    stakeholder: StakeholderCreate,
    records: Records = Depends(get_records)
):
    return {"data": await create_stakeholder(records, stakeholder)}


@router.get("/{stakeholder_id}", response_model=Envelope[StakeholderRead])
async def get_stakeholder_endpoint(
    stakeholder_id: str,
    records: Records = Depends(get_records)
):
    return {"data": await records.stakeholders.get(stakeholder_id)}


@router.put("/{stakeholder_id}", response_model=Envelope[StakeholderRead])
async def update_stakeholder_endpoint(
    stakeholder_id: str,
    changes: StakeholderUpdate,
    records: Records = Depends(get_records)
):
    return {"data": await update_stakeholder(records, stakeholder_id, changes)}


@router.delete("/{stakeholder_id}", response_model=MessageResponse)
async def delete_stakeholder_endpoint(
    stakeholder_id: str,
    records: Records = Depends(get_records)
):
    await records.stakeholders.delete(stakeholder_id)
    return {"message": "Stakeholder deleted successfully"}


@router.post("/{stakeholder_id}/connect", response_model=Envelope[ConnectionRequest])
async def connect_stakeholder_endpoint(
    stakeholder_id: str,
    records: Records = Depends(get_records)
):
    """Request a connection with a stakeholder."""
    return {"data": await request_connection(records, stakeholder_id)}


@router.post("/{stakeholder_id}/message", response_model=Envelope[SentMessage])
async def message_stakeholder_endpoint(
    stakeholder_id: str,
    message: StakeholderMessage,
    records: Records = Depends(get_records)
):
    """Send a message to a stakeholder."""
    return {"data": await send_message(records, stakeholder_id, message)}


@router.get("/{stakeholder_id}/projects", response_model=ListEnvelope[ProjectRead])
async def stakeholder_projects_endpoint(
    stakeholder_id: str,
    records: Records = Depends(get_records)
):
    """Projects a stakeholder participates in."""
    projects = await get_stakeholder_projects(records, stakeholder_id)
    return {"data": projects, "total": len(projects)}


@router.post("/{stakeholder_id}/projects/{project_id}", response_model=Envelope[StakeholderRead])
async def link_project_endpoint(
    stakeholder_id: str,
    project_id: str,
    records: Records = Depends(get_records)
):
    """Link a stakeholder and a project on both sides."""
    return {"data": await link_project(records, stakeholder_id, project_id)}
