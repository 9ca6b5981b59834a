"""Shared utilities."""

from talentwatch.utils.exceptions import ConfigurationError, TalentWatchError
from talentwatch.utils.ids import new_id

__all__ = ["ConfigurationError", "TalentWatchError", "new_id"]
