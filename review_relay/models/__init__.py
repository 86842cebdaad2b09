"""
Data models for ReviewRelay.

- Review: normalized, source-agnostic review
- RunConfig / ServiceConfig: immutable per-run and per-deployment settings
"""
