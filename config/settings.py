"""
Configuration settings for ReviewRelay.

Centralized configuration read from the environment (and a local .env file).
Only main.py reads this module; components receive a ServiceConfig.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent

# Slack
SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN", "")
SLACK_CHANNEL = os.getenv("SLACK_CHANNEL", "")

# App Store
APPLE_ID = os.getenv("APPLE_ID", "")
IOS_APP_NAME = os.getenv("IOS_APP_NAME", "iOS UTR Sports App")

# Google Play
GOOGLE_PLAY_PACKAGE_NAME = os.getenv("GOOGLE_PLAY_PACKAGE_NAME", "")
GOOGLE_PLAY_JSON_KEY_PATH = os.getenv("GOOGLE_PLAY_JSON_KEY_PATH", "")
ANDROID_APP_NAME = os.getenv("ANDROID_APP_NAME", "Android UTR Sports App")

# Watermark
WATERMARK_PATH = Path(os.getenv("WATERMARK_PATH", str(PROJECT_ROOT / "lastRunTimestamp.txt")))
WATERMARK_STRATEGY = os.getenv("WATERMARK_STRATEGY", "now")  # "now" or "max_seen"

# Output
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "America/Los_Angeles")

# Network
HTTP_TIMEOUT_SECONDS = os.getenv("HTTP_TIMEOUT_SECONDS", "30")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FILE = os.getenv("LOG_FILE", str(PROJECT_ROOT / "reviewrelay.log"))
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
