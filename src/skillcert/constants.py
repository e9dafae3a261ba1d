"""Shared constants for the certificate registry."""

# Certificate ids start at 1; 0 marks "does not exist".
NONEXISTENT_CERTIFICATE_ID = 0

# An expiry date of 0 means the certificate never expires.
NO_EXPIRY = 0

NULL_IDENTITY = "0x0000000000000000000000000000000000000000"

DEFAULT_METRICS_PREFIX = "skillcert"
DEFAULT_ENV_PREFIX = "SKILLCERT_"
