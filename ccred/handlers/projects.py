"""
Project registration and maintenance handler.
"""

import logging
from typing import List, Optional

from ccred.core.constants import PROJECT_ID_PREFIX
from ccred.core.exceptions import StateConflictError
from ccred.db.store import Records
from ccred.handlers.stakeholders import link_project
from ccred.models.credit import CarbonCredit
from ccred.models.project import Project, ProjectCategory, ProjectCreate, ProjectStatus, ProjectUpdate
from ccred.models.upload import DataUpload
from ccred.utils.ids import new_id

logger = logging.getLogger(__name__)


async def create_project(records: Records, project_data: ProjectCreate) -> Project:
    """
    Register a new project.

    Stakeholders named in the request must exist and are linked on both sides.
    """
    stakeholder_ids = list(dict.fromkeys(project_data.stakeholders))
    for stakeholder_id in stakeholder_ids:
        await records.stakeholders.get(stakeholder_id)

    project = Project.model_validate({
        **project_data.model_dump(mode="json", exclude={"stakeholders"}),
        "id": new_id(PROJECT_ID_PREFIX)
    })
    project = await records.projects.insert(project)
    for stakeholder_id in stakeholder_ids:
        await link_project(records, stakeholder_id, project.id)
    logger.info("Registered project %s (%s)", project.id, project.name)
    return project


async def get_projects(
    records: Records,
    category: Optional[ProjectCategory] = None,
    status: Optional[ProjectStatus] = None
) -> List[Project]:
    """Return projects, optionally filtered by category and status."""
    predicates = []
    if category:
        predicates.append(Project.category == category)
    if status:
        predicates.append(Project.status == status)
    return await records.projects.list(*predicates, order_by=Project.created_at)


async def update_project(records: Records, project_id: str, changes: ProjectUpdate) -> Project:
    """Merge the supplied fields into a project."""
    return await records.projects.update(project_id, changes.model_dump(mode="json", exclude_unset=True))


async def delete_project(records: Records, project_id: str) -> None:
    """
    Delete a project.

    Projects still referenced by uploads or credits are kept; their
    children hold the project id and would be orphaned.
    """
    await records.projects.get(project_id)

    uploads = await records.uploads.count(DataUpload.project_id == project_id)
    credits = await records.credits.count(CarbonCredit.project_id == project_id)
    if uploads or credits:
        raise StateConflictError(
            f"Project is referenced by {uploads} upload(s) and {credits} credit(s)",
            details={"project_id": project_id}
        )

    await records.projects.delete(project_id)
    logger.info("Deleted project %s", project_id)
