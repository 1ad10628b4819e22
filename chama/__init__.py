"""Chama management API — members, loans, chair approvals, polls, notifications."""

__version__ = "1.0.0"
