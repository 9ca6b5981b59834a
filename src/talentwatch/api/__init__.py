"""HTTP API for consent, access validation, alerts, reports and exports."""

from talentwatch.api.app import create_app

__all__ = ["create_app"]
