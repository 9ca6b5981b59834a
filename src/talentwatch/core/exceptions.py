"""Core exceptions for consent enforcement, delivery and storage."""

from datetime import datetime

from talentwatch.utils.exceptions import TalentWatchError


class ConsentDeniedError(TalentWatchError):
    """Raised when a subject has not granted the scope a purpose requires.

    Attributes:
        subject_id: The data subject whose consent was checked
        purpose: The caller-stated purpose
        reason: Human-readable denial reason
    """

    def __init__(self, message: str, subject_id: str, purpose: str, reason: str | None = None):
        super().__init__(message)
        self.subject_id = subject_id
        self.purpose = purpose
        self.reason = reason or message

    def __str__(self) -> str:
        return f"ConsentDeniedError({self.subject_id}, {self.purpose}): {self.args[0]}"


class ConsentExpiredError(TalentWatchError):
    """Raised when a consent record is past its retention window.

    Attributes:
        subject_id: The data subject whose consent expired
        expiry: When the consent expired
    """

    def __init__(self, message: str, subject_id: str, expiry: datetime):
        super().__init__(message)
        self.subject_id = subject_id
        self.expiry = expiry

    def __str__(self) -> str:
        return (
            f"ConsentExpiredError: {self.args[0]} "
            f"(subject={self.subject_id}, expired={self.expiry.isoformat()})"
        )


class AuthExpiredError(TalentWatchError):
    """Raised when the registry rejects the current access token."""

    def __init__(self, message: str = "Registry access token expired"):
        super().__init__(message)


class RegistryUnavailableError(TalentWatchError):
    """Raised when the external talent registry cannot be reached.

    Attributes:
        operation: The registry call that failed
        status_code: HTTP status if a response was received
    """

    def __init__(self, message: str, operation: str, status_code: int | None = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code

    def __str__(self) -> str:
        status = f", status={self.status_code}" if self.status_code is not None else ""
        return f"RegistryUnavailableError({self.operation}{status}): {self.args[0]}"


class DeliveryError(TalentWatchError):
    """Raised by a delivery channel when a send attempt fails.

    Attributes:
        message: Failure reason without the channel prefix
        channel: Channel name that failed
    """

    def __init__(self, message: str, channel: str):
        super().__init__(message)
        self.message = message
        self.channel = channel

    def __str__(self) -> str:
        return f"DeliveryError({self.channel}): {self.args[0]}"


class NotFoundError(TalentWatchError):
    """Raised when a stored record does not exist.

    Attributes:
        resource: Kind of record (alert, report, rule)
        resource_id: Identifier that was looked up
    """

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found: {resource_id}")
        self.resource = resource
        self.resource_id = resource_id


class StorageCorruptionError(TalentWatchError):
    """Raised when a persisted blob cannot be decoded.

    Attributes:
        key: Storage key holding the corrupt value
    """

    def __init__(self, message: str, key: str):
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        return f"StorageCorruptionError({self.key}): {self.args[0]}"
