from datetime import datetime, timezone

BUCKET = "public-keys"
FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
STAMP = "2024-01-02T03:04:05.678Z"


def fixed_clock() -> datetime:
    return FIXED_NOW


def backup_name(kid: str) -> str:
    return f"jwks-{STAMP}-{kid}.bkp.json"
