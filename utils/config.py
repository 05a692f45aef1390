"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_optional(name: str) -> Optional[str]:
    return os.getenv(name) or None


def _default_backend() -> str:
    backend = os.getenv("STORAGE_BACKEND")
    if backend:
        return backend.strip().lower()
    return "cloud" if os.getenv("CLOUD_NAME") else "local"


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8080")))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    upload_dir: Optional[str] = field(default_factory=lambda: _env_optional("UPLOAD_DIR"))

    # Record store
    mongo_uri: Optional[str] = field(default_factory=lambda: _env_optional("MONGO_URI"))
    mongo_db: str = field(default_factory=lambda: os.getenv("MONGO_DB", "hostel_printing"))

    # Blob store
    storage_backend: str = field(default_factory=_default_backend)
    cloud_name: Optional[str] = field(default_factory=lambda: _env_optional("CLOUD_NAME"))
    cloud_key: Optional[str] = field(default_factory=lambda: _env_optional("CLOUD_KEY"))
    cloud_secret: Optional[str] = field(default_factory=lambda: _env_optional("CLOUD_SECRET"))
    cloud_region: str = field(default_factory=lambda: os.getenv("CLOUD_REGION", "us-east-1"))
    cloud_endpoint: Optional[str] = field(default_factory=lambda: _env_optional("CLOUD_ENDPOINT"))
    cloud_folder: str = field(default_factory=lambda: os.getenv("CLOUD_FOLDER", "printing_documents"))

    # Workflow switches
    require_documents: bool = field(default_factory=lambda: _env_flag("REQUIRE_DOCUMENTS", True))
    strict_phone: bool = field(default_factory=lambda: _env_flag("STRICT_PHONE", True))
    gate_replacements: bool = field(default_factory=lambda: _env_flag("GATE_REPLACEMENTS", True))

    def __post_init__(self) -> None:
        if self.storage_backend not in ("local", "cloud"):
            raise ValueError(f"Unknown STORAGE_BACKEND: {self.storage_backend}")
        if self.storage_backend == "cloud" and not self.cloud_name:
            raise ValueError("STORAGE_BACKEND=cloud requires CLOUD_NAME")

    @property
    def records_path(self) -> str:
        """JSON record store file used when no MONGO_URI is set."""
        return str(Path(self.data_dir) / "records.json")

    @property
    def uploads_path(self) -> str:
        """Directory for the local blob store."""
        return self.upload_dir or str(Path(self.data_dir) / "uploads")

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary (secrets omitted)."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "data_dir": self.data_dir,
            "upload_dir": self.uploads_path,
            "record_store": "mongo" if self.mongo_uri else "json",
            "mongo_db": self.mongo_db,
            "storage_backend": self.storage_backend,
            "cloud_name": self.cloud_name,
            "cloud_region": self.cloud_region,
            "cloud_endpoint": self.cloud_endpoint,
            "cloud_folder": self.cloud_folder,
            "require_documents": self.require_documents,
            "strict_phone": self.strict_phone,
            "gate_replacements": self.gate_replacements,
        }
