"""Tests for configuration loading."""

from autojwks.config import load_config
from autojwks.providers import InMemoryKeyManagementService, get_providers
from autojwks.providers.aws import AwsKeyManagementService, S3ObjectStore


def test_defaults_when_config_missing():
    config = load_config()
    assert config.provider.backend == "aws"
    assert config.keyset.path == "jwks.json"
    assert config.keyset.backup_suffix == ".bkp.json"
    assert config.key.tags == {"purpose": "auto-rotate"}
    assert config.database_url is None


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
provider:
  backend: inmemory
  aws:
    region: eu-west-1
keyset:
  path: well-known/jwks.json
key:
  tags:
    team: identity
database_url: sqlite:///tmp/rotations.db
"""
    )
    monkeypatch.setenv("AUTOJWKS_CONFIG", str(config_path))

    config = load_config()
    assert config.provider.backend == "inmemory"
    assert config.provider.aws.region == "eu-west-1"
    assert config.keyset.path == "well-known/jwks.json"
    assert config.keyset.backup_prefix == "jwks-"
    assert config.key.tags == {"team": "identity"}
    assert config.database_url == "sqlite:///tmp/rotations.db"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("AUTOJWKS_PROVIDER", "InMemory")
    monkeypatch.setenv("AUTOJWKS_DATABASE_URL", "sqlite://rotations.db")
    monkeypatch.setenv("AWS_REGION", "ap-southeast-2")

    config = load_config()
    assert config.provider.backend == "inmemory"
    assert config.database_url == "sqlite://rotations.db"
    assert config.provider.aws.region == "ap-southeast-2"


def test_get_providers_uses_config(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("provider:\n  backend: inmemory\n")
    monkeypatch.setenv("AUTOJWKS_CONFIG", str(config_path))

    providers = get_providers()
    assert isinstance(providers.kms, InMemoryKeyManagementService)


def test_get_providers_builds_aws_clients():
    config = load_config()
    config.provider.aws.region = "us-east-1"

    providers = get_providers("aws", config=config)
    assert isinstance(providers.kms, AwsKeyManagementService)
    assert isinstance(providers.store, S3ObjectStore)
    assert providers.store.client.meta.region_name == "us-east-1"
