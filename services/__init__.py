"""
Service layer for business logic.

This package contains the reconciliation session service, which
orchestrates parsing, normalization, matching and export, and the
senders that deliver receipt reminders.
"""
