"""
Source adapters.

Each adapter fetches raw review records from one vendor:
- App Store: customer-review RSS/XML feed
- Google Play: Android Publisher reviews API
"""
