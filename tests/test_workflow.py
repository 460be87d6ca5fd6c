"""Tests for the verification workflow."""

import pytest
import pytest_asyncio

from ccred.core.exceptions import NotFoundError, StateConflictError
from ccred.handlers.audit import get_audit_entries
from ccred.handlers.workflow import (
    approve_submission,
    can_transition,
    get_submissions,
    get_verification_history,
    reject_submission,
    request_more_data,
    start_review,
    submit_for_verification,
)
from ccred.models.upload import UploadStatus
from ccred.models.verification import (
    ApprovalDecision,
    MoreDataRequest,
    RejectionDecision,
    VerificationStatus,
)
from conftest import make_upload


@pytest.fixture
def rejection():
    return RejectionDecision(
        reason="Sampling plots do not match the registered boundary",
        required_actions=["Re-survey plots 4-9", "Attach GPS tracks"],
        reviewed_by="auditor-1"
    )


class TestSubmit:

    @pytest.mark.asyncio
    async def test_submit_creates_one_pending_submission(self, records, project):
        upload = await make_upload(records, project)

        submission = await submit_for_verification(records, upload.id, submitted_by="dev-1")

        assert submission.status == VerificationStatus.PENDING
        assert submission.upload_id == upload.id
        assert submission.project_id == project.id
        assert submission.data_type == "field_survey"
        assert submission.field_metadata["equipment"] == "GPS tablet"
        assert len(await get_submissions(records)) == 1

    @pytest.mark.asyncio
    async def test_submit_marks_upload_and_links_back(self, records, project):
        upload = await make_upload(records, project)
        submission = await submit_for_verification(records, upload.id)

        upload = await records.uploads.get(upload.id)
        assert upload.status == UploadStatus.SUBMITTED_FOR_VERIFICATION
        assert upload.verification_id == submission.id
        assert submission.submitted_by == "field-team"

    @pytest.mark.asyncio
    async def test_submit_missing_upload(self, records):
        with pytest.raises(NotFoundError, match="Upload not found"):
            await submit_for_verification(records, "UPL-missing")
        assert await records.submissions.count() == 0

    @pytest.mark.asyncio
    async def test_submit_is_audited(self, records, project):
        upload = await make_upload(records, project)
        submission = await submit_for_verification(records, upload.id)
        entries = await get_audit_entries(records, entity_id=submission.id)
        assert [e.action for e in entries] == ["verification_submitted"]
        assert len(entries[0].payload_hash) == 64


class TestDecisions:

    @pytest_asyncio.fixture
    async def submission(self, records, project):
        upload = await make_upload(records, project)
        return await submit_for_verification(records, upload.id)

    @pytest.mark.asyncio
    async def test_start_review(self, records, submission):
        reviewed = await start_review(records, submission.id, reviewed_by="auditor-1")
        assert reviewed.status == VerificationStatus.UNDER_REVIEW
        assert reviewed.reviewed_by == "auditor-1"

    @pytest.mark.asyncio
    async def test_start_review_twice_conflicts(self, records, submission):
        await start_review(records, submission.id)
        with pytest.raises(StateConflictError):
            await start_review(records, submission.id)

    @pytest.mark.asyncio
    async def test_approve_records_credits_and_reviewer(self, records, submission):
        approved = await approve_submission(
            records,
            submission.id,
            ApprovalDecision(credits_generated=250, quality_score=88.5, comments="Good", reviewed_by="auditor-1")
        )
        assert approved.status == VerificationStatus.APPROVED
        assert approved.credits_generated == 250
        assert approved.quality_score == 88.5
        assert approved.reviewed_by == "auditor-1"
        assert approved.reviewed_at is not None
        assert approved.approved_at is not None

    @pytest.mark.asyncio
    async def test_approve_defaults_credits_generated_to_zero(self, records, submission):
        approved = await approve_submission(records, submission.id, ApprovalDecision())
        assert approved.credits_generated == 0

    @pytest.mark.asyncio
    async def test_approve_missing_submission(self, records):
        with pytest.raises(NotFoundError, match="Submission not found"):
            await approve_submission(records, "SUB-missing", ApprovalDecision())

    @pytest.mark.asyncio
    async def test_reject_preserves_reason_verbatim(self, records, submission, rejection):
        rejected = await reject_submission(records, submission.id, rejection)
        assert rejected.status == VerificationStatus.REJECTED
        assert rejected.reason == "Sampling plots do not match the registered boundary"
        assert rejected.required_actions == ["Re-survey plots 4-9", "Attach GPS tracks"]
        assert rejected.rejected_at is not None

    @pytest.mark.asyncio
    async def test_request_more_data(self, records, submission):
        updated = await request_more_data(
            records, submission.id, MoreDataRequest(requested_data=["Soil carbon lab results"])
        )
        assert updated.status == VerificationStatus.MORE_DATA_REQUESTED
        assert updated.requested_data == ["Soil carbon lab results"]
        assert updated.requested_at is not None

    @pytest.mark.asyncio
    async def test_more_data_requested_can_still_be_decided(self, records, submission):
        await request_more_data(records, submission.id, MoreDataRequest(requested_data=["Photos"]))
        approved = await approve_submission(
            records, submission.id, ApprovalDecision(credits_generated=10), allow_terminal_retransition=False
        )
        assert approved.status == VerificationStatus.APPROVED

    @pytest.mark.asyncio
    async def test_approving_rejected_submission_is_refused_by_default(self, records, submission, rejection):
        await reject_submission(records, submission.id, rejection, allow_terminal_retransition=False)
        with pytest.raises(StateConflictError, match="rejected"):
            await approve_submission(
                records, submission.id, ApprovalDecision(credits_generated=5), allow_terminal_retransition=False
            )
        current = await records.submissions.get(submission.id)
        assert current.status == VerificationStatus.REJECTED
        assert current.reason == rejection.reason

    @pytest.mark.asyncio
    async def test_approving_rejected_submission_when_retransition_allowed(self, records, submission, rejection):
        await reject_submission(records, submission.id, rejection, allow_terminal_retransition=True)
        approved = await approve_submission(
            records, submission.id, ApprovalDecision(credits_generated=5), allow_terminal_retransition=True
        )
        assert approved.status == VerificationStatus.APPROVED
        assert approved.credits_generated == 5

    @pytest.mark.asyncio
    async def test_each_decision_is_audited(self, records, submission, rejection):
        await start_review(records, submission.id)
        await reject_submission(records, submission.id, rejection)
        entries = await get_audit_entries(records, entity_id=submission.id)
        assert [e.action for e in entries] == [
            "verification_submitted",
            "verification_review_started",
            "verification_rejected",
        ]


class TestTransitions:

    @pytest.mark.parametrize("current", [
        VerificationStatus.PENDING,
        VerificationStatus.UNDER_REVIEW,
        VerificationStatus.MORE_DATA_REQUESTED,
    ])
    def test_open_states_accept_decisions(self, current):
        assert can_transition(current, VerificationStatus.APPROVED)
        assert can_transition(current, VerificationStatus.REJECTED)

    @pytest.mark.parametrize("current", [VerificationStatus.APPROVED, VerificationStatus.REJECTED])
    def test_decided_states_reopen_only_when_allowed(self, current):
        assert not can_transition(current, VerificationStatus.REJECTED)
        assert can_transition(current, VerificationStatus.REJECTED, allow_terminal_retransition=True)

    def test_credit_issued_is_final(self):
        for target in VerificationStatus:
            assert not can_transition(VerificationStatus.CREDIT_ISSUED, target, allow_terminal_retransition=True)

    def test_only_approved_becomes_credit_issued(self):
        assert can_transition(VerificationStatus.APPROVED, VerificationStatus.CREDIT_ISSUED)
        assert not can_transition(VerificationStatus.PENDING, VerificationStatus.CREDIT_ISSUED)


class TestQueries:

    @pytest.mark.asyncio
    async def test_filter_by_status_and_history(self, records, project, rejection):
        first = await submit_for_verification(records, (await make_upload(records, project)).id)
        await submit_for_verification(records, (await make_upload(records, project)).id)
        await reject_submission(records, first.id, rejection)

        pending = await get_submissions(records, VerificationStatus.PENDING)
        assert len(pending) == 1

        history = await get_verification_history(records)
        assert [s.id for s in history] == [first.id]
        assert await get_verification_history(records, project_id="PRJ-other") == []
