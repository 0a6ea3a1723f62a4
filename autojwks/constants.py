"""Shared constants for key rotation."""

KEY_SPEC_P256 = "ECC_NIST_P256"
KEY_USAGE_SIGN_VERIFY = "SIGN_VERIFY"
SIGNING_ALGORITHM = "ES256"

SIGNER_GRANT_OPERATIONS = ("DescribeKey", "GetPublicKey", "Sign", "Verify")

DEFAULT_KEY_TAGS = {"purpose": "auto-rotate"}

DEFAULT_JWKS_PATH = "jwks.json"
DEFAULT_BACKUP_PREFIX = "jwks-"
DEFAULT_BACKUP_SUFFIX = ".bkp.json"

JSON_CONTENT_TYPE = "application/json"
