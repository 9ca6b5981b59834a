"""Talentwatch: consent-gated talent analytics, alerting and reporting."""

__version__ = "0.1.0"
