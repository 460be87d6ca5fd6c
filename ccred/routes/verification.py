"""
Verification workflow endpoints.
"""

from fastapi import APIRouter, Depends
from typing import Optional

from ccred.core.config import get_settings
from ccred.core.database import get_records
from ccred.db.store import Records
from ccred.models.common import Envelope, ListEnvelope, MessageResponse
from ccred.models.verification import (
    ApprovalDecision,
    MoreDataRequest,
    RejectionDecision,
    ReviewStart,
    VerificationStatus,
    VerificationSubmissionRead,
)
from ccred.handlers.workflow import (
    approve_submission,
    get_submissions,
    get_verification_history,
    reject_submission,
    request_more_data,
    start_review,
)

router = APIRouter(prefix="/verification", tags=["verification"])
settings = get_settings()


@router.get("/submissions", response_model=ListEnvelope[VerificationSubmissionRead])
async def list_submissions_endpoint(
    status: Optional[VerificationStatus] = None,
    records: Records = Depends(get_records)
):
    """List verification submissions, optionally by status."""
    submissions = await get_submissions(records, status)
    return {"data": submissions, "total": len(submissions)}


@router.get("/submissions/{submission_id}", response_model=Envelope[VerificationSubmissionRead])
async def get_submission_endpoint(
    submission_id: str,
    records: Records = Depends(get_records)
):
    return {"data": await records.submissions.get(submission_id)}


@router.delete("/submissions/{submission_id}", response_model=MessageResponse)
async def delete_submission_endpoint(
    submission_id: str,
    records: Records = Depends(get_records)
):
    await records.submissions.delete(submission_id)
    return {"message": "Submission deleted successfully"}


@router.post("/submissions/{submission_id}/review", response_model=Envelope[VerificationSubmissionRead])
async def start_review_endpoint(
    submission_id: str,
    body: Optional[ReviewStart] = None,
    records: Records = Depends(get_records)
):
    """Take a pending submission under review."""
    reviewed_by = body.reviewed_by if body else None
    return {"data": await start_review(records, submission_id, reviewed_by)}


@router.post("/submissions/{submission_id}/approve", response_model=Envelope[VerificationSubmissionRead])
async def approve_submission_endpoint(
    submission_id: str,
    decision: Optional[ApprovalDecision] = None,
    records: Records = Depends(get_records)
):
    """Approve a submission. credits_generated defaults to 0."""
    submission = await approve_submission(
        records,
        submission_id,
        decision or ApprovalDecision(),
        allow_terminal_retransition=settings.allow_terminal_retransition
    )
    return {"data": submission}


@router.post("/submissions/{submission_id}/reject", response_model=Envelope[VerificationSubmissionRead])
async def reject_submission_endpoint(
    submission_id: str,
    decision: RejectionDecision,
    records: Records = Depends(get_records)
):
    """Reject a submission with a reason and required actions."""
    submission = await reject_submission(
        records,
        submission_id,
        decision,
        allow_terminal_retransition=settings.allow_terminal_retransition
    )
    return {"data": submission}


@router.post("/submissions/{submission_id}/request-more", response_model=Envelope[VerificationSubmissionRead])
async def request_more_data_endpoint(
    submission_id: str,
    request: Optional[MoreDataRequest] = None,
    records: Records = Depends(get_records)
):
    """Ask the project developer for more data."""
    submission = await request_more_data(
        records,
        submission_id,
        request or MoreDataRequest(),
        allow_terminal_retransition=settings.allow_terminal_retransition
    )
    return {"data": submission}


@router.get("/history", response_model=ListEnvelope[VerificationSubmissionRead])
async def verification_history_endpoint(
    project_id: Optional[str] = None,
    records: Records = Depends(get_records)
):
    """Decided submissions (anything past pending), optionally for one project."""
    history = await get_verification_history(records, project_id)
    return {"data": history, "total": len(history)}
