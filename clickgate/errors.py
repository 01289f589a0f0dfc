class ClickGateError(Exception):
    """Base class for errors raised by the click gate."""


class ValidationError(ClickGateError):
    """Subject id missing or malformed. Raised before the store is touched."""


class StorageError(ClickGateError):
    """Record store read/write failed. Callers may retry."""


class PolicyMisconfiguration(ClickGateError):
    """Escalation policy or config values are unusable. Raised at startup."""
