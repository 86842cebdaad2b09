"""
Utility modules for ReviewRelay.

- Watermark: persisted last-run timestamp
"""
