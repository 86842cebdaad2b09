"""
ReviewRelay - incremental app store review delivery.

Polls the Apple App Store and Google Play review feeds, keeps only reviews
newer than the last run, prints them and optionally forwards them to Slack.
"""

__version__ = "1.0.0"
