"""
Verification workflow handler.

Submission lifecycle::

    pending -> under_review -> approved | rejected | more_data_requested
    approved -> credit_issued            (see handlers.credits.issue_credit)

Reviewer decisions are written with a compare-and-swap on the status the
decision was taken against, so two reviewers racing on one submission
cannot both win.
"""

import logging
from typing import Any, Dict, List, Optional

from ccred.core.config import get_settings
from ccred.core.constants import SUBMISSION_ID_PREFIX
from ccred.core.exceptions import StateConflictError
from ccred.db.store import Records
from ccred.handlers.audit import record_audit
from ccred.models.upload import UploadStatus
from ccred.models.verification import (
    ApprovalDecision,
    MoreDataRequest,
    RejectionDecision,
    VerificationStatus,
    VerificationSubmission,
)
from ccred.utils.ids import new_id
from ccred.utils.time import utc_now

logger = logging.getLogger(__name__)

# States a reviewer decision can be taken from
DECIDABLE_STATES = {
    VerificationStatus.PENDING,
    VerificationStatus.UNDER_REVIEW,
    VerificationStatus.MORE_DATA_REQUESTED,
}
# Decided states that may be decided again when re-transition is allowed
REOPENABLE_STATES = {
    VerificationStatus.APPROVED,
    VerificationStatus.REJECTED,
}
REVIEWABLE_STATES = {
    VerificationStatus.PENDING,
    VerificationStatus.MORE_DATA_REQUESTED,
}


def can_transition(
    current: VerificationStatus,
    target: VerificationStatus,
    allow_terminal_retransition: bool = False
) -> bool:
    """Whether a submission in ``current`` may move to ``target``."""
    if current == VerificationStatus.CREDIT_ISSUED:
        return False
    if target == VerificationStatus.UNDER_REVIEW:
        return current in REVIEWABLE_STATES
    if target == VerificationStatus.CREDIT_ISSUED:
        return current == VerificationStatus.APPROVED
    if current in DECIDABLE_STATES:
        return True
    return allow_terminal_retransition and current in REOPENABLE_STATES


async def submit_for_verification(
    records: Records,
    upload_id: str,
    submitted_by: Optional[str] = None
) -> VerificationSubmission:
    """
    Open a verification submission for an upload.

    The submission copies the upload's data type and metadata; the upload
    moves to submitted_for_verification and points back at the submission.
    """
    upload = await records.uploads.get(upload_id)
    await records.projects.get(upload.project_id)

    submission = VerificationSubmission(
        id=new_id(SUBMISSION_ID_PREFIX),
        upload_id=upload.id,
        project_id=upload.project_id,
        data_type=upload.data_type.value,
        submitted_by=submitted_by or upload.uploaded_by,
        status=VerificationStatus.PENDING,
        field_metadata=dict(upload.field_metadata or {})
    )
    submission = await records.submissions.insert(submission)

    await records.uploads.update(upload.id, {
        "status": UploadStatus.SUBMITTED_FOR_VERIFICATION,
        "verification_id": submission.id
    })

    await record_audit(
        records,
        action="verification_submitted",
        entity_type="verification_submission",
        entity_id=submission.id,
        payload={"upload_id": upload.id, "project_id": upload.project_id}
    )
    logger.info("Upload %s submitted for verification as %s", upload.id, submission.id)
    return submission


async def _transition(
    records: Records,
    submission_id: str,
    target: VerificationStatus,
    changes: Dict[str, Any],
    action: str,
    allow_terminal_retransition: Optional[bool]
) -> VerificationSubmission:
    if allow_terminal_retransition is None:
        allow_terminal_retransition = get_settings().allow_terminal_retransition

    submission = await records.submissions.get(submission_id)
    current = submission.status
    if not can_transition(current, target, allow_terminal_retransition):
        raise StateConflictError(
            f"Submission is {current.value} and cannot become {target.value}",
            details={"submission_id": submission_id, "status": current.value}
        )

    updated = await records.submissions.update(
        submission_id,
        {**changes, "status": target},
        expected={"status": current}
    )

    await record_audit(
        records,
        action=action,
        entity_type="verification_submission",
        entity_id=submission_id,
        payload={"from": current.value, "to": target.value, **changes},
        extra={"reviewed_by": changes.get("reviewed_by")}
    )
    logger.info("Submission %s: %s -> %s", submission_id, current.value, target.value)
    return updated


async def start_review(
    records: Records,
    submission_id: str,
    reviewed_by: Optional[str] = None
) -> VerificationSubmission:
    """Take a pending submission under review."""
    return await _transition(
        records,
        submission_id,
        VerificationStatus.UNDER_REVIEW,
        {"reviewed_by": reviewed_by},
        action="verification_review_started",
        allow_terminal_retransition=False
    )


async def approve_submission(
    records: Records,
    submission_id: str,
    decision: ApprovalDecision,
    allow_terminal_retransition: Optional[bool] = None
) -> VerificationSubmission:
    """Approve a submission, recording the credits it justifies."""
    now = utc_now()
    return await _transition(
        records,
        submission_id,
        VerificationStatus.APPROVED,
        {
            "credits_generated": decision.credits_generated,
            "quality_score": decision.quality_score,
            "comments": decision.comments,
            "reviewed_by": decision.reviewed_by,
            "reviewed_at": now,
            "approved_at": now,
        },
        action="verification_approved",
        allow_terminal_retransition=allow_terminal_retransition
    )


async def reject_submission(
    records: Records,
    submission_id: str,
    decision: RejectionDecision,
    allow_terminal_retransition: Optional[bool] = None
) -> VerificationSubmission:
    """Reject a submission; the reason is stored exactly as given."""
    now = utc_now()
    return await _transition(
        records,
        submission_id,
        VerificationStatus.REJECTED,
        {
            "reason": decision.reason,
            "comments": decision.comments,
            "required_actions": list(decision.required_actions),
            "reviewed_by": decision.reviewed_by,
            "reviewed_at": now,
            "rejected_at": now,
        },
        action="verification_rejected",
        allow_terminal_retransition=allow_terminal_retransition
    )


async def request_more_data(
    records: Records,
    submission_id: str,
    request: MoreDataRequest,
    allow_terminal_retransition: Optional[bool] = None
) -> VerificationSubmission:
    """Send a submission back to the developer for more data."""
    now = utc_now()
    return await _transition(
        records,
        submission_id,
        VerificationStatus.MORE_DATA_REQUESTED,
        {
            "requested_data": list(request.requested_data),
            "comments": request.comments,
            "reviewed_by": request.reviewed_by,
            "reviewed_at": now,
            "requested_at": now,
        },
        action="verification_more_data_requested",
        allow_terminal_retransition=allow_terminal_retransition
    )


async def get_submissions(
    records: Records,
    status: Optional[VerificationStatus] = None
) -> List[VerificationSubmission]:
    """Submissions, optionally filtered by status."""
    predicates = []
    if status:
        predicates.append(VerificationSubmission.status == status)
    return await records.submissions.list(*predicates, order_by=VerificationSubmission.submitted_at)


async def get_verification_history(
    records: Records,
    project_id: Optional[str] = None
) -> List[VerificationSubmission]:
    """Submissions that have left pending, optionally for one project."""
    predicates = [VerificationSubmission.status != VerificationStatus.PENDING]
    if project_id:
        predicates.append(VerificationSubmission.project_id == project_id)
    return await records.submissions.list(*predicates, order_by=VerificationSubmission.submitted_at)
