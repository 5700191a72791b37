"""
Core reconciliation modules.

This package contains:
- config: Application configuration and settings
- directory: In-memory employee directory
- exceptions: Custom exception classes
- exporters: Excel export of classified transactions
- logger: Logging configuration
- matching: Bank transaction / expense record matcher
- normalize: Row to record normalization
- notifications: Receipt reminder request builder
- parsing: Delimited text parsing
- schema: Pydantic models for ledger records
"""
