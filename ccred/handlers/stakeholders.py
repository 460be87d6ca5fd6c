"""
Stakeholder directory handler.
"""

import logging
from typing import List, Optional

from sqlmodel import col

from ccred.core.constants import STAKEHOLDER_ID_PREFIX
from ccred.db.store import Records
from ccred.models.project import Project
from ccred.models.stakeholder import (
    ConnectionRequest,
    SentMessage,
    Stakeholder,
    StakeholderCategory,
    StakeholderCreate,
    StakeholderMessage,
    StakeholderStatus,
    StakeholderUpdate,
)
from ccred.utils.ids import new_id
from ccred.utils.time import utc_now

logger = logging.getLogger(__name__)


async def create_stakeholder(records: Records, stakeholder_data: StakeholderCreate) -> Stakeholder:
    project_ids = list(dict.fromkeys(stakeholder_data.projects))
    for project_id in project_ids:
        await records.projects.get(project_id)

    stakeholder = Stakeholder.model_validate({
        **stakeholder_data.model_dump(mode="json", exclude={"projects"}),
        "id": new_id(STAKEHOLDER_ID_PREFIX)
    })
    stakeholder = await records.stakeholders.insert(stakeholder)
    for project_id in project_ids:
        stakeholder = await link_project(records, stakeholder.id, project_id)
    return stakeholder


async def get_stakeholders(
    records: Records,
    category: Optional[StakeholderCategory] = None,
    status: Optional[StakeholderStatus] = None
) -> List[Stakeholder]:
    """Return stakeholders, optionally filtered by category and status."""
    predicates = []
    if category:
        predicates.append(Stakeholder.category == category)
    if status:
        predicates.append(Stakeholder.status == status)
    return await records.stakeholders.list(*predicates, order_by=Stakeholder.created_at)


async def update_stakeholder(
    records: Records,
    stakeholder_id: str,
    changes: StakeholderUpdate
) -> Stakeholder:
    return await records.stakeholders.update(
        stakeholder_id, changes.model_dump(mode="json", exclude_unset=True)
    )


async def request_connection(records: Records, stakeholder_id: str) -> ConnectionRequest:
    """Record a connection request to a stakeholder."""
    stakeholder = await records.stakeholders.get(stakeholder_id)
    logger.info("Connection requested with stakeholder %s", stakeholder.id)
    return ConnectionRequest(stakeholder_id=stakeholder.id, requested_at=utc_now())


async def send_message(
    records: Records,
    stakeholder_id: str,
    message: StakeholderMessage
) -> SentMessage:
    """Send a message to a stakeholder. Delivery is handled outside this service."""
    stakeholder = await records.stakeholders.get(stakeholder_id)
    logger.info("Message to stakeholder %s: %s", stakeholder.id, message.subject or "(no subject)")
    return SentMessage(
        stakeholder_id=stakeholder.id,
        subject=message.subject,
        message=message.message,
        sent_at=utc_now()
    )


async def get_stakeholder_projects(records: Records, stakeholder_id: str) -> List[Project]:
    """Projects the stakeholder lists as its own."""
    stakeholder = await records.stakeholders.get(stakeholder_id)
    if not stakeholder.projects:
        return []
    return await records.projects.list(col(Project.id).in_(stakeholder.projects))


async def link_project(records: Records, stakeholder_id: str, project_id: str) -> Stakeholder:
    """
    Associate a stakeholder with a project on both sides.

    Linking an already-linked pair changes nothing.
    """
    stakeholder = await records.stakeholders.get(stakeholder_id)
    project = await records.projects.get(project_id)

    if project.id not in stakeholder.projects:
        stakeholder = await records.stakeholders.update(
            stakeholder.id, {"projects": [*stakeholder.projects, project.id]}
        )
    if stakeholder.id not in project.stakeholders:
        await records.projects.update(
            project.id, {"stakeholders": [*project.stakeholders, stakeholder.id]}
        )
    return stakeholder
