"""Identifier helpers."""

from uuid_utils import uuid7


def new_id(prefix: str) -> str:
    """Return a time-ordered identifier such as ``alert_0192...``."""
    return f"{prefix}_{uuid7()}"
