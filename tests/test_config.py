"""
Tests for environment configuration and service wiring.
"""

import pytest

from printdesk import JsonRecordStore, LocalBlobStore, MongoRecordStore, S3BlobStore
from utils.config import Config
from web.app import build_service

CONFIG_VARS = (
    "HOST", "PORT", "DEBUG", "LOG_LEVEL", "DATA_DIR", "UPLOAD_DIR", "MONGO_URI", "MONGO_DB",
    "STORAGE_BACKEND", "CLOUD_NAME", "CLOUD_KEY", "CLOUD_SECRET", "CLOUD_REGION",
    "CLOUD_ENDPOINT", "CLOUD_FOLDER", "REQUIRE_DOCUMENTS", "STRICT_PHONE", "GATE_REPLACEMENTS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    def test_defaults(self, clean_env):
        config = Config.load()
        assert config.port == 8080
        assert config.storage_backend == "local"
        assert config.mongo_uri is None
        assert config.require_documents is True
        assert config.strict_phone is True
        assert config.gate_replacements is True
        assert config.records_path.endswith("records.json")
        assert config.uploads_path.endswith("uploads")

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("PORT", "9000")
        clean_env.setenv("REQUIRE_DOCUMENTS", "false")
        clean_env.setenv("STRICT_PHONE", "0")
        clean_env.setenv("UPLOAD_DIR", "/srv/uploads")
        config = Config.load()
        assert config.port == 9000
        assert config.require_documents is False
        assert config.strict_phone is False
        assert config.uploads_path == "/srv/uploads"

    def test_cloud_name_selects_cloud_backend(self, clean_env):
        clean_env.setenv("CLOUD_NAME", "prints")
        assert Config.load().storage_backend == "cloud"

    def test_cloud_backend_requires_bucket(self, clean_env):
        clean_env.setenv("STORAGE_BACKEND", "cloud")
        with pytest.raises(ValueError):
            Config.load()

    def test_unknown_backend(self, clean_env):
        clean_env.setenv("STORAGE_BACKEND", "ftp")
        with pytest.raises(ValueError):
            Config.load()

    def test_to_dict_omits_secrets(self, clean_env):
        clean_env.setenv("CLOUD_NAME", "prints")
        clean_env.setenv("CLOUD_SECRET", "s3cr3t")
        data = Config.load().to_dict()
        assert "s3cr3t" not in data.values()
        assert data["storage_backend"] == "cloud"


class TestBuildService:
    def test_local_wiring(self, clean_env, tmp_path):
        clean_env.setenv("DATA_DIR", str(tmp_path))
        service = build_service(Config.load())
        assert isinstance(service.records, JsonRecordStore)
        assert isinstance(service.blobs, LocalBlobStore)
        assert service.require_documents is True

    def test_cloud_and_mongo_wiring(self, clean_env, tmp_path):
        clean_env.setenv("DATA_DIR", str(tmp_path))
        clean_env.setenv("MONGO_URI", "mongodb://localhost:27017")
        clean_env.setenv("CLOUD_NAME", "prints")
        clean_env.setenv("CLOUD_KEY", "key")
        clean_env.setenv("CLOUD_SECRET", "secret")
        service = build_service(Config.load())
        assert isinstance(service.records, MongoRecordStore)
        assert isinstance(service.blobs, S3BlobStore)
        assert service.blobs.bucket == "prints"
