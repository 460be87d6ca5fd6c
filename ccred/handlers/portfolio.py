"""
Portfolio aggregation handler.
"""

from collections import defaultdict
from typing import Dict, List

from ccred.db.store import Records
from ccred.models.credit import CarbonCredit, CarbonCreditRead, CreditStatus, Portfolio, ProjectCredits
from ccred.models.project import Project


async def get_portfolio(records: Records) -> Portfolio:
    """
    Roll credits up across the registry.

    Returns:
        - total_credits: credits_amount summed over every credit, any status
        - active_credits: number of credits in status active
        - credits_by_project: every project with its own credits
    """
    credits = await records.credits.list(order_by=CarbonCredit.created_at)
    projects = await records.projects.list(order_by=Project.created_at)

    by_project: Dict[str, List[CarbonCredit]] = defaultdict(list)
    for credit in credits:
        by_project[credit.project_id].append(credit)

    return Portfolio(
        total_credits=sum(c.credits_amount for c in credits),
        active_credits=sum(1 for c in credits if c.status == CreditStatus.ACTIVE),
        credits_by_project=[
            ProjectCredits(
                project_id=project.id,
                project_name=project.name,
                credits=[CarbonCreditRead.model_validate(c.model_dump()) for c in by_project[project.id]]
            )
            for project in projects
        ]
    )
