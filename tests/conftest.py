import pytest

import autojwks.persistence as persistence
from autojwks.contracts import RotationRequest
from autojwks.providers import (
    InMemoryCacheInvalidationService,
    InMemoryKeyManagementService,
    InMemoryObjectStore,
    Providers,
)
from tests.fixtures.clock import BUCKET


@pytest.fixture
def request_payload() -> dict:
    return {
        "keyAlias": "api-tokens",
        "canSignRoleArn": "arn:aws:iam::123456789012:role/token-signer",
        "keyManagementRoleArn": "arn:aws:iam::123456789012:role/key-admin",
        "publicKeysBucketName": BUCKET,
        "cloudfrontDistributionId": "E2EXAMPLE",
    }


@pytest.fixture
def rotation_request(request_payload) -> RotationRequest:
    return RotationRequest.model_validate(request_payload)


@pytest.fixture
def providers() -> Providers:
    store = InMemoryObjectStore({(BUCKET, "jwks.json"): b'{"keys": []}'})
    return Providers(
        kms=InMemoryKeyManagementService(),
        store=store,
        cdn=InMemoryCacheInvalidationService(),
    )


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOJWKS_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("AUTOJWKS_PROVIDER", raising=False)
    monkeypatch.delenv("AUTOJWKS_DATABASE_URL", raising=False)
    persistence._repository_instance = None
    persistence._repository_url = None
    yield
    if isinstance(persistence._repository_instance, persistence.SQLiteRotationRepository):
        persistence._repository_instance.close()
    persistence._repository_instance = None
    persistence._repository_url = None
