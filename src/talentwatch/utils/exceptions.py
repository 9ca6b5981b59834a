"""Custom exceptions for Talentwatch."""


class TalentWatchError(Exception):
    """Base exception for all Talentwatch errors."""

    pass


class ConfigurationError(TalentWatchError):
    """Error in configuration or settings."""

    pass
