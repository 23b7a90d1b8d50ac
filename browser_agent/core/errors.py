from __future__ import annotations

from enum import Enum


class ConfigurationErrorKind(str, Enum):
    UNSUPPORTED_PROVIDER = "unsupported-provider"
    MISSING_CREDENTIAL = "missing-credential"
    MISSING_ENDPOINT = "missing-endpoint"
    MISSING_DEPLOYMENT_NAME = "missing-deployment-name"
    MALFORMED_VALUE = "malformed-value"


class ConfigurationError(ValueError):
    """Static setup defect detected before any client is built.

    Attributes:
        kind: Which check failed.
        field: The configuration field that is missing or invalid.
        env_var: The environment variable the caller should set, if any.
    """

    def __init__(
        self,
        kind: ConfigurationErrorKind,
        message: str,
        *,
        field: str | None = None,
        env_var: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.field = field
        self.env_var = env_var
