"""Unit tests for festival registry models, loading and the validation CLI."""

import json

import pytest
from pydantic import ValidationError

from festival_proxy.errors import RegistryError
from festival_proxy.models.festival import Festival, FestivalRegistry
from festival_proxy.repositories.festival_registry import FestivalRegistryRepository
from festival_proxy.validate_registry import main as validate_main


def festival(**overrides):
    record = {
        "id": "cbf2025",
        "name": "Cambridge Beer Festival 2025",
        "start_date": "2025-05-19",
        "end_date": "2025-05-24",
        "data_base_url": "https://data.cambridgebeerfestival.com/cbf2025",
    }
    record.update(overrides)
    return record


def registry_document(**overrides):
    document = {
        "version": "1.0.0",
        "default_festival_id": "cbf2025",
        "festivals": [festival()],
    }
    document.update(overrides)
    return document


class TestFestivalModel:
    """Test validation of individual festival records."""

    def test_minimal_record(self):
        """Test required fields alone form a valid festival with defaults."""
        parsed = Festival.model_validate(festival())

        assert parsed.id == "cbf2025"
        assert parsed.available_beverage_types == ["beer"]
        assert parsed.is_active is False

    def test_unknown_fields_are_kept(self):
        """Test extra registry fields do not fail validation."""
        parsed = Festival.model_validate(festival(sponsor="CAMRA"))

        assert parsed.model_extra["sponsor"] == "CAMRA"

    def test_end_before_start_rejected(self):
        """Test a festival cannot end before it starts."""
        with pytest.raises(ValidationError):
            Festival.model_validate(festival(start_date="2025-05-24", end_date="2025-05-19"))

    def test_id_with_slash_rejected(self):
        """Test ids must be a single path segment."""
        with pytest.raises(ValidationError):
            Festival.model_validate(festival(id="cbf/2025"))

    def test_relative_data_url_rejected(self):
        """Test data_base_url must be absolute."""
        with pytest.raises(ValidationError):
            Festival.model_validate(festival(data_base_url="/cbf2025"))


class TestFestivalRegistryModel:
    """Test registry-level invariants."""

    def test_default_must_reference_existing_festival(self):
        """Test an unknown default festival id is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            FestivalRegistry.model_validate(registry_document(default_festival_id="cbf1999"))

        assert "cbf1999" in str(exc_info.value)

    def test_duplicate_ids_rejected(self):
        """Test festival ids must be unique."""
        document = registry_document(festivals=[festival(), festival(name="Duplicate")])

        with pytest.raises(ValidationError) as exc_info:
            FestivalRegistry.model_validate(document)

        assert "duplicate" in str(exc_info.value)

    def test_empty_festival_list_rejected(self):
        """Test a registry needs at least one festival."""
        with pytest.raises(ValidationError):
            FestivalRegistry.model_validate(registry_document(festivals=[]))

    def test_default_festival_lookup(self):
        """Test the default festival property resolves the record."""
        document = registry_document(
            festivals=[festival(id="cbf2024", name="2024"), festival()],
        )

        registry = FestivalRegistry.model_validate(document)

        assert registry.default_festival.id == "cbf2025"
        assert registry.get_festival("cbf2024").name == "2024"
        assert registry.get_festival("missing") is None


class TestFestivalRegistryRepository:
    """Test loading the registry document."""

    def test_packaged_registry_is_valid(self):
        """Test the registry shipped with the package loads."""
        repository = FestivalRegistryRepository.load()

        ids = [f.id for f in repository.registry.festivals]
        assert repository.default_festival_id in ids

    def test_raw_bytes_are_preserved(self, tmp_path):
        """Test the served bytes are exactly the file contents."""
        raw = json.dumps(registry_document(), indent=4).encode("utf-8")
        path = tmp_path / "festivals.json"
        path.write_bytes(raw)

        repository = FestivalRegistryRepository.load(path)

        assert repository.raw == raw
        assert repository.source == str(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises RegistryError."""
        with pytest.raises(RegistryError):
            FestivalRegistryRepository.load(tmp_path / "missing.json")

    def test_invalid_json(self):
        """Test malformed JSON raises RegistryError."""
        with pytest.raises(RegistryError) as exc_info:
            FestivalRegistryRepository.from_bytes(b"{not json", source="broken.json")

        assert "broken.json" in str(exc_info.value)

    def test_invalid_document(self):
        """Test schema violations raise RegistryError."""
        raw = json.dumps(registry_document(default_festival_id="nope")).encode()

        with pytest.raises(RegistryError):
            FestivalRegistryRepository.from_bytes(raw)


class TestValidateRegistryCommand:
    """Test the registry validation command."""

    def test_valid_registry_exits_zero(self, tmp_path, capsys):
        """Test a valid file prints a summary and returns 0."""
        path = tmp_path / "festivals.json"
        path.write_text(json.dumps(registry_document()))

        assert validate_main([str(path)]) == 0

        out = capsys.readouterr().out
        assert "1 festival(s) defined" in out
        assert "Default festival: cbf2025" in out
        assert "Version: 1.0.0" in out

    def test_packaged_registry_by_default(self, capsys):
        """Test no argument validates the packaged registry."""
        assert validate_main([]) == 0

    def test_invalid_registry_exits_one(self, tmp_path, capsys):
        """Test an invalid file reports the error and returns 1."""
        path = tmp_path / "festivals.json"
        path.write_text(json.dumps(registry_document(default_festival_id="nope")))

        assert validate_main([str(path)]) == 1

        assert "validation failed" in capsys.readouterr().err
