"""
Carbon credit issuance and lifecycle handler.
"""

import logging
from typing import List, Optional

from ccred.core.config import get_settings
from ccred.core.constants import CERTIFICATE_PATH_TEMPLATE, CREDIT_ID_PREFIX, UNKNOWN_PROJECT_NAME
from ccred.core.exceptions import StateConflictError
from ccred.db.store import Records
from ccred.handlers.audit import record_audit
from ccred.models.credit import (
    CarbonCredit,
    CarbonCreditIssue,
    CreditCertificate,
    CreditStatus,
)
from ccred.models.verification import VerificationStatus
from ccred.utils.ids import new_id, unique_serial_number
from ccred.utils.time import current_year, utc_now

logger = logging.getLogger(__name__)

APPROVED_VERIFICATION_REQUIRED = "Valid approved verification required"
OPEN_CREDIT_STATES = {CreditStatus.ISSUED, CreditStatus.ACTIVE}


async def issue_credit(records: Records, credit_data: CarbonCreditIssue) -> CarbonCredit:
    """
    Issue a carbon credit from an approved verification.

    This is the registry's quality gate: the verification must exist and be
    exactly ``approved``. It is claimed by swapping its status to
    ``credit_issued`` before the credit is written, so one approval can
    never mint two credits. If writing the credit fails the claim is
    released again.
    """
    project = await records.projects.get(credit_data.project_id)

    verification = await records.submissions.find(credit_data.verification_id)
    if verification is None or verification.status != VerificationStatus.APPROVED:
        raise StateConflictError(
            APPROVED_VERIFICATION_REQUIRED,
            details={"verification_id": credit_data.verification_id}
        )

    verification_id = verification.id
    try:
        await records.submissions.update(
            verification_id,
            {"status": VerificationStatus.CREDIT_ISSUED},
            expected={"status": VerificationStatus.APPROVED}
        )
    except StateConflictError as e:
        raise StateConflictError(APPROVED_VERIFICATION_REQUIRED, details=e.details) from e

    project_id = project.id
    now = utc_now()
    vintage = credit_data.vintage or current_year()
    try:
        serial_number = await unique_serial_number(
            project_id,
            vintage,
            now,
            lambda serial: records.credits.exists(CarbonCredit.serial_number == serial)
        )
        credit = CarbonCredit(
            id=new_id(CREDIT_ID_PREFIX),
            project_id=project_id,
            verification_id=verification_id,
            serial_number=serial_number,
            credits_amount=credit_data.credits_amount,
            methodology=credit_data.methodology or get_settings().default_methodology,
            vintage=vintage,
            description=credit_data.description,
            status=CreditStatus.ACTIVE,
            created_at=now,
            updated_at=now
        )
        credit = await records.credits.insert(credit)
    except Exception:
        # the session is expired after rollback; only local ids are safe to read
        logger.exception("Issuing credit from %s failed; releasing the verification", verification_id)
        await records.rollback()
        await records.submissions.update(
            verification_id,
            {"status": VerificationStatus.APPROVED},
            expected={"status": VerificationStatus.CREDIT_ISSUED}
        )
        raise

    await record_audit(
        records,
        action="credit_issued",
        entity_type="carbon_credit",
        entity_id=credit.id,
        payload={
            "serial_number": credit.serial_number,
            "project_id": credit.project_id,
            "verification_id": credit.verification_id,
            "credits_amount": credit.credits_amount,
            "vintage": credit.vintage,
        }
    )
    logger.info(
        "Issued %s credits as %s (serial %s) from %s",
        credit.credits_amount, credit.id, credit.serial_number, verification_id
    )
    return credit


async def get_credits(
    records: Records,
    project_id: Optional[str] = None,
    status: Optional[CreditStatus] = None
) -> List[CarbonCredit]:
    """Credits, optionally filtered by project and status."""
    predicates = []
    if project_id:
        predicates.append(CarbonCredit.project_id == project_id)
    if status:
        predicates.append(CarbonCredit.status == status)
    return await records.credits.list(*predicates, order_by=CarbonCredit.created_at)


async def _close_credit(
    records: Records,
    credit_id: str,
    target: CreditStatus,
    changes: dict
) -> CarbonCredit:
    credit = await records.credits.get(credit_id)
    if credit.status not in OPEN_CREDIT_STATES:
        raise StateConflictError(
            f"Credit is {credit.status.value} and cannot become {target.value}",
            details={"credit_id": credit_id}
        )
    updated = await records.credits.update(
        credit_id,
        {**changes, "status": target},
        expected={"status": credit.status}
    )
    await record_audit(
        records,
        action=f"credit_{target.value}",
        entity_type="carbon_credit",
        entity_id=credit_id,
        payload={"serial_number": credit.serial_number, **changes}
    )
    return updated


async def retire_credit(
    records: Records,
    credit_id: str,
    retired_by: str,
    reason: Optional[str] = None
) -> CarbonCredit:
    """Retire a credit against an emission claim. Retirement is final."""
    return await _close_credit(records, credit_id, CreditStatus.RETIRED, {
        "retired_by": retired_by,
        "retired_at": utc_now(),
        "retirement_reason": reason,
    })


async def cancel_credit(records: Records, credit_id: str) -> CarbonCredit:
    """Cancel a credit. Cancellation is final."""
    return await _close_credit(records, credit_id, CreditStatus.CANCELLED, {})


async def build_certificate(records: Records, credit_id: str, base_url: str) -> CreditCertificate:
    """Describe the certificate for a credit and where it is served."""
    credit = await records.credits.get(credit_id)
    project = await records.projects.find(credit.project_id)

    return CreditCertificate(
        credit_id=credit.id,
        serial_number=credit.serial_number,
        project_name=project.name if project else UNKNOWN_PROJECT_NAME,
        credits_amount=credit.credits_amount,
        methodology=credit.methodology,
        vintage=credit.vintage,
        issued_date=credit.created_at,
        certificate_url=base_url.rstrip("/") + CERTIFICATE_PATH_TEMPLATE.format(credit_id=credit.id)
    )
