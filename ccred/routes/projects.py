"""
Project endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.common import Envelope, ListEnvelope, MessageResponse
from ccred.models.project import ProjectCategory, ProjectCreate, ProjectRead, ProjectStatus, ProjectUpdate
from ccred.handlers.projects import create_project, delete_project, get_projects, update_project

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ListEnvelope[ProjectRead])
async def list_projects_endpoint(
    category: Optional[ProjectCategory] = None,
    status: Optional[ProjectStatus] = None,
    records: Records = Depends(get_records)
):
    """List projects, optionally filtered by category and status."""
    projects = await get_projects(records, category, status)
    return {"data": projects, "total": len(projects)}


@router.post("", response_model=Envelope[ProjectRead], status_code=status.HTTP_201_CREATED)
async def create_project_endpoint(
    project: ProjectCreate,
    records: Records = Depends(get_records)
):
    """Register a new project."""
    return {"data": await create_project(records, project)}


@router.get("/{project_id}", response_model=Envelope[ProjectRead])
async def get_project_endpoint(
    project_id: str,
    records: Records = Depends(get_records)
):
    """Get project by ID."""
    return {"data": await records.projects.get(project_id)}


@router.put("/{project_id}", response_model=Envelope[ProjectRead])
async def update_project_endpoint(
    project_id: str,
    changes: ProjectUpdate,
    records: Records = Depends(get_records)
):
    """Update the supplied project fields."""
    return {"data": await update_project(records, project_id, changes)}


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project_endpoint(
    project_id: str,
    records: Records = Depends(get_records)
):
    """Delete a project that no upload or credit refers to."""
    await delete_project(records, project_id)
    return {"message": "Project deleted successfully"}
