"""API configuration settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _optional_int(value: str | None) -> int | None:
    return int(value) if value else None


@dataclass
class APIConfig:
    """Configuration for the medledger API."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # CORS settings
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_headers: list[str] = field(default_factory=lambda: ["*"])

    # Store settings (data_dir None = in-memory only)
    data_dir: str | None = None
    memory_id: int = 0
    max_key_size: int | None = None
    max_value_size: int | None = None

    # Set to get reproducible patient ids
    random_seed: int | None = None

    @classmethod
    def from_env(cls) -> APIConfig:
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("MEDLEDGER_HOST", "0.0.0.0"),
            port=int(os.getenv("MEDLEDGER_PORT", "8000")),
            debug=os.getenv("MEDLEDGER_DEBUG", "").lower() in ("true", "1", "yes"),
            cors_origins=os.getenv("MEDLEDGER_CORS_ORIGINS", "*").split(","),
            data_dir=os.getenv("MEDLEDGER_DATA_DIR") or None,
            memory_id=int(os.getenv("MEDLEDGER_MEMORY_ID", "0")),
            max_key_size=_optional_int(os.getenv("MEDLEDGER_MAX_KEY_SIZE")),
            max_value_size=_optional_int(os.getenv("MEDLEDGER_MAX_VALUE_SIZE")),
            random_seed=_optional_int(os.getenv("MEDLEDGER_RANDOM_SEED")),
        )


# Global config instance
_config: APIConfig | None = None


def get_config() -> APIConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = APIConfig.from_env()
    return _config
