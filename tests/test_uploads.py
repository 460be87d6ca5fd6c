"""Tests for field-data uploads and the file store."""

import hashlib
import io
from pathlib import Path

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from ccred.core.exceptions import NotFoundError, ValidationError
from ccred.handlers.files import FileStore
from ccred.handlers.uploads import (
    create_upload,
    parse_metadata,
    supported_data_types,
    update_upload_status,
    validate_upload_data,
)
from ccred.models.upload import DataType, UploadStatus
from conftest import make_upload


def upload_file(content: bytes, filename="plot-survey.csv", content_type="text/csv") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


class TestParseMetadata:

    def test_empty(self):
        assert parse_metadata(None) == {}
        assert parse_metadata("") == {}

    def test_known_and_unknown_keys(self):
        parsed = parse_metadata(
            '{"collection_date": "2024-03-01", "location": {"latitude": 16.5, "longitude": 80.6},'
            ' "plot_count": 12}'
        )
        assert parsed["collection_date"] == "2024-03-01"
        assert parsed["location"] == {"latitude": 16.5, "longitude": 80.6}
        assert parsed["plot_count"] == 12

    def test_invalid_json(self):
        with pytest.raises(ValidationError, match="invalid JSON"):
            parse_metadata("{not json")

    def test_not_an_object(self):
        with pytest.raises(ValidationError, match="JSON object"):
            parse_metadata("[1, 2]")

    def test_bad_known_field(self):
        with pytest.raises(ValidationError, match="metadata.quality_score"):
            parse_metadata('{"quality_score": 140}')


class TestValidateUploadData:

    def test_data_type_required(self):
        with pytest.raises(ValidationError):
            validate_upload_data(None)

    def test_valid(self):
        result = validate_upload_data(
            "satellite_data",
            {"collection_date": "2024-03-01", "location": {"latitude": 1, "longitude": 2}}
        )
        assert result.valid and result.success
        assert result.errors == []

    def test_collects_every_problem(self):
        result = validate_upload_data("seismic", {})
        assert not result.valid
        assert result.errors == ["Invalid data type", "Collection date is required", "Location is required"]

    def test_metadata_optional(self):
        assert validate_upload_data("field_survey").valid

    def test_supported_types_match_enum(self):
        assert supported_data_types() == [t.value for t in DataType]
        assert len(supported_data_types()) == 10


class TestFileStore:

    @pytest.mark.asyncio
    async def test_save_writes_blob_with_checksum(self, upload_dir):
        store = FileStore(upload_dir, 1024)
        content = b"plot,species,dbh\n1,teak,31.2\n"

        stored = await store.save(upload_file(content))

        assert stored.name == "plot-survey.csv"
        assert stored.type == "text/csv"
        assert stored.size == len(content)
        assert stored.checksum == hashlib.sha256(content).hexdigest()
        assert Path(stored.path).read_bytes() == content
        assert Path(stored.path).parent == upload_dir

    @pytest.mark.asyncio
    async def test_files_get_distinct_blob_names(self, upload_dir):
        store = FileStore(upload_dir, 1024)
        first, second = await store.save_all([upload_file(b"a"), upload_file(b"a")])
        assert first.path != second.path

    @pytest.mark.asyncio
    async def test_size_limit(self, upload_dir):
        store = FileStore(upload_dir, 16)
        with pytest.raises(ValidationError, match="exceeds"):
            await store.save(upload_file(b"x" * 17))

    @pytest.mark.asyncio
    async def test_refused_file_removes_the_ones_already_written(self, upload_dir):
        store = FileStore(upload_dir, 10)
        with pytest.raises(ValidationError):
            await store.save_all([upload_file(b"12345"), upload_file(b"x" * 100)])
        assert list(upload_dir.iterdir()) == []


class TestUploads:

    @pytest.mark.asyncio
    async def test_create_upload(self, records, project, upload_dir):
        store = FileStore(upload_dir, 1024)

        upload = await create_upload(
            records,
            store,
            project_id=project.id,
            data_type=DataType.DRONE_IMAGERY,
            files=[upload_file(b"tile-1", filename="tile-1.tif", content_type="image/tiff")],
            metadata='{"collection_date": "2024-02-11", "equipment": "DJI M300"}',
            uploaded_by="drone-team"
        )

        assert upload.id.startswith("UPL")
        assert upload.status == UploadStatus.UPLOADED
        assert upload.files[0]["name"] == "tile-1.tif"
        assert upload.field_metadata["equipment"] == "DJI M300"
        assert upload.verification_id is None

    @pytest.mark.asyncio
    async def test_create_upload_for_missing_project_writes_nothing(self, records, upload_dir):
        store = FileStore(upload_dir, 1024)
        with pytest.raises(NotFoundError):
            await create_upload(records, store, "PRJ-missing", DataType.FIELD_SURVEY, files=[upload_file(b"x")])
        assert not upload_dir.exists()

    @pytest.mark.asyncio
    async def test_status_update(self, records, project):
        upload = await make_upload(records, project)
        updated = await update_upload_status(records, upload.id, UploadStatus.VALIDATED)
        assert updated.status == UploadStatus.VALIDATED

    @pytest.mark.asyncio
    async def test_submitted_status_only_through_verify(self, records, project):
        upload = await make_upload(records, project)
        with pytest.raises(ValidationError):
            await update_upload_status(records, upload.id, UploadStatus.SUBMITTED_FOR_VERIFICATION)

    @pytest.mark.asyncio
    async def test_failed_record_removes_written_blobs(self, records, project, upload_dir, monkeypatch):
        store = FileStore(upload_dir, 1024)
        project_id = project.id

        async def insert_fails(record):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(records.uploads, "insert", insert_fails)
        with pytest.raises(RuntimeError):
            await create_upload(
                records, store, project_id, DataType.FIELD_SURVEY,
                files=[upload_file(b"a"), upload_file(b"b")]
            )

        assert list(upload_dir.iterdir()) == []
