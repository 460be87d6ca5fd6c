# SQLModel database models

from ccred.models.project import Project
from ccred.models.stakeholder import Stakeholder
from ccred.models.upload import DataUpload
from ccred.models.verification import VerificationSubmission
from ccred.models.credit import CarbonCredit
from ccred.models.listing import MarketplaceListing
from ccred.models.audit import AuditLog

__all__ = [
    "Project",
    "Stakeholder",
    "DataUpload",
    "VerificationSubmission",
    "CarbonCredit",
    "MarketplaceListing",
    "AuditLog",
]
