"""Configuration validation for startup checks.

Usage:
    from talentwatch.config.validation import validate_or_raise

    validate_or_raise(settings)
"""

from dataclasses import dataclass
from enum import Enum

from talentwatch.config.settings import Settings, StorageBackend, get_settings
from talentwatch.core.logging import get_logger
from talentwatch.utils.exceptions import ConfigurationError

logger = get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # app cannot start
    WARNING = "warning"


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Run all configuration checks.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []
    results.extend(_validate_privacy(settings))
    results.extend(_validate_storage(settings))
    results.extend(_validate_registry(settings))
    results.extend(_validate_environment(settings))
    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration, logging warnings.

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    for warning in results:
        logger.warning("configuration_warning", field=warning.field, message=warning.message)


def _validate_privacy(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []
    salt_missing = not settings.anonymizer_hash_salt.get_secret_value()

    if settings.ENVIRONMENT == "production":
        if salt_missing:
            results.append(
                ValidationResult(
                    field="anonymizer_hash_salt",
                    severity=ValidationSeverity.ERROR,
                    message="Anonymizer salt is required in production",
                    suggestion="Set ANONYMIZER_HASH_SALT to a long random string",
                )
            )
        if settings.analytics_fail_open:
            results.append(
                ValidationResult(
                    field="analytics_fail_open",
                    severity=ValidationSeverity.ERROR,
                    message="Fail-open analytics must be disabled in production",
                    suggestion="Set ANALYTICS_FAIL_OPEN=false",
                )
            )
    elif salt_missing:
        results.append(
            ValidationResult(
                field="anonymizer_hash_salt",
                severity=ValidationSeverity.WARNING,
                message="Anonymizer salt not configured - hashed ids are guessable",
            )
        )

    return results


def _validate_storage(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    if settings.storage_backend == StorageBackend.REDIS and not settings.REDIS_URL.startswith(
        ("redis://", "rediss://")
    ):
        results.append(
            ValidationResult(
                field="REDIS_URL",
                severity=ValidationSeverity.ERROR,
                message="Redis URL has unexpected format",
                suggestion="Expected format: redis://host:port/db",
            )
        )

    if settings.ENVIRONMENT == "production" and settings.storage_backend == StorageBackend.MEMORY:
        results.append(
            ValidationResult(
                field="storage_backend",
                severity=ValidationSeverity.WARNING,
                message="In-memory storage loses consent and audit records on restart",
                suggestion="Set STORAGE_BACKEND=redis",
            )
        )

    return results


def _validate_registry(settings: Settings) -> list[ValidationResult]:
    if settings.registry_api_key is not None:
        return []
    return [
        ValidationResult(
            field="registry_api_key",
            severity=ValidationSeverity.WARNING,
            message="Registry API key not configured - talent sync will fail",
        )
    ]


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        return [
            ValidationResult(
                field="DEBUG",
                severity=ValidationSeverity.ERROR,
                message="Debug mode must be disabled in production",
                suggestion="Set DEBUG=false for production",
            )
        ]
    return []
