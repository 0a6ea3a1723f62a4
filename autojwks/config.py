from __future__ import annotations

import os
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_BACKUP_PREFIX,
    DEFAULT_BACKUP_SUFFIX,
    DEFAULT_JWKS_PATH,
    DEFAULT_KEY_TAGS,
)


class AwsConfig(BaseModel):
    """Connection settings shared by the AWS provider clients."""

    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    profile: Optional[str] = None


class ProviderConfig(BaseModel):
    """Selects the backend used for key management, storage and invalidation."""

    backend: Literal["aws", "inmemory"] = "aws"
    aws: AwsConfig = AwsConfig()


class KeySetConfig(BaseModel):
    """Naming of the published key set and its backups."""

    path: str = DEFAULT_JWKS_PATH
    backup_prefix: str = DEFAULT_BACKUP_PREFIX
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX


class KeyConfig(BaseModel):
    """Settings applied to newly created signing keys."""

    tags: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_KEY_TAGS))


class AutoJwksConfig(BaseModel):
    """Top-level configuration model."""

    provider: ProviderConfig = ProviderConfig()
    keyset: KeySetConfig = KeySetConfig()
    key: KeyConfig = KeyConfig()
    database_url: Optional[str] = None


def load_config(path: Optional[str] = None) -> AutoJwksConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to AUTOJWKS_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("AUTOJWKS_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = AutoJwksConfig(**data)
    else:
        config = AutoJwksConfig()

    env_backend = os.getenv("AUTOJWKS_PROVIDER")
    if env_backend:
        config.provider.backend = env_backend.lower()
    env_db_url = os.getenv("AUTOJWKS_DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    env_region = os.getenv("AWS_REGION")
    if env_region and not config.provider.aws.region:
        config.provider.aws.region = env_region
    return config
