"""
Unit tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables out of these tests."""
    for name in [
        "TENANT_ID",
        "DATABASE_URL",
        "UPLOAD_CHUNK_SIZE",
        "CONDUCTOR_SECRET",
        "IDENTITY_BACKEND",
        "LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.tenant_id == "default_app"
        assert settings.upload_chunk_size == 400
        assert settings.identity_backend == "local"
        assert settings.conductor_secret is None
        assert settings.questions_collection_path == "artifacts/default_app/public/data/exams_questions"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TENANT_ID", "school-9")
        monkeypatch.setenv("UPLOAD_CHUNK_SIZE", "250")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.questions_collection_path == "artifacts/school-9/public/data/exams_questions"
        assert settings.upload_chunk_size == 250
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("size", [0, 501])
    def test_chunk_size_bounds(self, size):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, upload_chunk_size=size)

    @pytest.mark.parametrize("tenant", ["", "a/b"])
    def test_invalid_tenant(self, tenant):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, tenant_id=tenant)

    def test_unknown_identity_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, identity_backend="ldap")
