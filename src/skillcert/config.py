"""
Registry configuration.

Configuration can be built directly, loaded from YAML, or read from
``SKILLCERT_*`` environment variables.
"""

import logging
import os
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from skillcert.constants import DEFAULT_ENV_PREFIX, DEFAULT_METRICS_PREFIX
from skillcert.identity.caller import is_null_identity

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_TRUE_VALUES = {"1", "true", "yes", "on"}


class RegistryConfig(BaseModel):
    """Configuration for a certificate registry."""

    owner: str = Field(..., description="Identity of the registry owner")
    storage: str = Field(
        default="memory",
        description='"memory" or path to a JSON snapshot file',
    )
    log_level: str = Field(default="INFO")
    metrics_enabled: bool = False
    metrics_prefix: str = Field(default=DEFAULT_METRICS_PREFIX, min_length=1)

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, v: str) -> str:
        if is_null_identity(v):
            raise ValueError("owner must be a non-null identity")
        return v

    @field_validator("storage")
    @classmethod
    def validate_storage(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("storage must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "RegistryConfig":
        """Load configuration from YAML.

        The settings may sit at the top level or under a ``registry`` key.
        """
        data = yaml.safe_load(yaml_content) or {}
        if "registry" in data:
            data = data["registry"]
        return cls(**data)

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "RegistryConfig":
        """Load configuration from ``<prefix>OWNER``, ``<prefix>STORAGE`` etc."""
        env = os.environ if environ is None else environ
        data: dict = {}
        for name in ("owner", "storage", "log_level", "metrics_prefix"):
            value = env.get(f"{prefix}{name.upper()}")
            if value is not None:
                data[name] = value
        enabled = env.get(f"{prefix}METRICS_ENABLED")
        if enabled is not None:
            data["metrics_enabled"] = enabled.strip().lower() in _TRUE_VALUES
        return cls(**data)

    def to_yaml(self) -> str:
        """Export configuration as YAML."""
        return yaml.dump({"registry": self.model_dump()}, default_flow_style=False)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stream handler to the ``skillcert`` logger.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("skillcert")
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    return logger
