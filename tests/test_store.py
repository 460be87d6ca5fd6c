"""Tests for the record stores."""

import pytest

from ccred.core.exceptions import NotFoundError, StateConflictError
from ccred.models.project import Project, ProjectCategory, ProjectStatus
from ccred.models.stakeholder import Stakeholder, StakeholderCategory
from ccred.models.upload import UploadStatus
from conftest import make_project, make_upload


class TestRecordStore:

    @pytest.mark.asyncio
    async def test_insert_and_get(self, records, project):
        fetched = await records.projects.get(project.id)
        assert fetched.name == "Amaravati Green Belt"
        assert fetched.location["country"] == "India"
        assert fetched.category == ProjectCategory.REFORESTATION

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, records):
        with pytest.raises(NotFoundError, match="Project not found"):
            await records.projects.get("PRJ-missing")

    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, records):
        assert await records.credits.find("CRD-missing") is None

    @pytest.mark.asyncio
    async def test_list_with_predicates(self, records):
        await make_project(records, name="Mangroves", category=ProjectCategory.BLUE_CARBON)
        await make_project(records, name="Forest", category=ProjectCategory.REFORESTATION)

        blue = await records.projects.list(Project.category == ProjectCategory.BLUE_CARBON)
        assert [p.name for p in blue] == ["Mangroves"]
        assert len(await records.projects.list()) == 2
        assert await records.projects.count(Project.category == ProjectCategory.REFORESTATION) == 1

    @pytest.mark.asyncio
    async def test_update_coerces_json_mode_values(self, records, project):
        updated = await records.projects.update(project.id, {"status": "active", "start_date": "2024-01-01"})
        assert updated.status == ProjectStatus.ACTIVE
        assert updated.start_date.isoformat() == "2024-01-01"

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, records):
        with pytest.raises(NotFoundError):
            await records.stakeholders.update("STK-missing", {"name": "x"})

    @pytest.mark.asyncio
    async def test_compare_and_swap_applies_when_expected_matches(self, records, project):
        upload = await make_upload(records, project)
        updated = await records.uploads.update(
            upload.id,
            {"status": UploadStatus.PROCESSING},
            expected={"status": UploadStatus.UPLOADED}
        )
        assert updated.status == UploadStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_compare_and_swap_conflict_leaves_record_unchanged(self, records, project):
        upload = await make_upload(records, project)
        with pytest.raises(StateConflictError):
            await records.uploads.update(
                upload.id,
                {"status": UploadStatus.REJECTED},
                expected={"status": UploadStatus.VALIDATED}
            )
        assert (await records.uploads.get(upload.id)).status == UploadStatus.UPLOADED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("store_name", [
        "projects", "stakeholders", "uploads", "submissions", "credits", "listings"
    ])
    async def test_delete_missing_keeps_store_unchanged(self, records, project, store_name):
        store = getattr(records, store_name)
        before = await store.count()
        with pytest.raises(NotFoundError):
            await store.delete("XXX-00000000")
        assert await store.count() == before

    @pytest.mark.asyncio
    async def test_delete(self, records):
        stakeholder = await records.stakeholders.insert(Stakeholder(
            id="STK-deadbeef", name="Green Verify Ltd", category=StakeholderCategory.VERIFIER
        ))
        await records.stakeholders.delete(stakeholder.id)
        assert await records.stakeholders.find(stakeholder.id) is None
