"""
Run configuration models.

RunConfig holds the per-run choices (store, count, flags) and ServiceConfig
holds credentials and environment-derived values. Both are built once in
main.py and passed down; no component reads settings or the environment.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from review_relay.errors import ConfigError
from review_relay.models.review import Source


class StoreChoice(Enum):
    APPLE = "apple"
    GOOGLE = "google"
    BOTH = "both"

    @property
    def sources(self) -> List[Source]:
        if self is StoreChoice.APPLE:
            return [Source.APP_STORE]
        if self is StoreChoice.GOOGLE:
            return [Source.GOOGLE_PLAY]
        return [Source.APP_STORE, Source.GOOGLE_PLAY]


class RunMode(Enum):
    PROD = "prod"
    TEST = "test"  # watermark neither consulted nor written


class WatermarkStrategy(Enum):
    NOW = "now"  # watermark = clock reading at the end of the run
    MAX_SEEN = "max_seen"  # watermark = newest delivered review timestamp


@dataclass(frozen=True)
class RunConfig:
    """Per-run choices, resolved from flags or prompts before the run starts."""
    store: str
    max_count: Optional[int] = None
    ignore_watermark: bool = False
    deliver_to_webhook: bool = False
    debug: bool = False
    mode: RunMode = RunMode.PROD
    watermark_strategy: WatermarkStrategy = WatermarkStrategy.NOW

    def __post_init__(self):
        # Store is validated by the orchestrator; only normalize the case here
        object.__setattr__(self, "store", (self.store or "").strip().lower())
        if self.max_count is not None and self.max_count < 1:
            raise ConfigError(f"Invalid review count: {self.max_count}. Must be >= 1")

    @property
    def is_test_mode(self) -> bool:
        return self.mode is RunMode.TEST

    @property
    def uses_watermark(self) -> bool:
        """True when stored watermark filters this run's reviews."""
        return not (self.ignore_watermark or self.is_test_mode)


def _parse_timeout(value) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be a number, got {value!r}") from None
    if not timeout > 0:
        raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be positive, got {value!r}")
    return timeout


@dataclass(frozen=True)
class ServiceConfig:
    """Credentials and environment-derived values."""
    slack_token: str = ""
    slack_channel: str = ""
    apple_id: str = ""
    google_package_name: str = ""
    google_key_path: str = ""
    ios_app_name: str = "iOS App"
    android_app_name: str = "Android App"
    watermark_path: Path = Path("lastRunTimestamp.txt")
    display_timezone: str = "America/Los_Angeles"
    http_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings) -> "ServiceConfig":
        """
        Build from the config.settings module (or any object with the same attributes).

        Raises:
            ConfigError: if HTTP_TIMEOUT_SECONDS is not a positive number
        """
        return cls(
            slack_token=settings.SLACK_BOT_TOKEN,
            slack_channel=settings.SLACK_CHANNEL,
            apple_id=settings.APPLE_ID,
            google_package_name=settings.GOOGLE_PLAY_PACKAGE_NAME,
            google_key_path=settings.GOOGLE_PLAY_JSON_KEY_PATH,
            ios_app_name=settings.IOS_APP_NAME,
            android_app_name=settings.ANDROID_APP_NAME,
            watermark_path=Path(settings.WATERMARK_PATH),
            display_timezone=settings.DISPLAY_TIMEZONE,
            http_timeout=_parse_timeout(settings.HTTP_TIMEOUT_SECONDS)
        )

    def validate(self, run_config: RunConfig) -> None:
        """
        Check that every credential this run needs is present.

        Raises:
            ConfigError: naming each missing setting
        """
        missing = []
        if run_config.deliver_to_webhook:
            if not self.slack_token:
                missing.append("SLACK_BOT_TOKEN")
            if not self.slack_channel:
                missing.append("SLACK_CHANNEL")

        try:
            sources = StoreChoice(run_config.store).sources
        except ValueError:
            # Reported by the orchestrator before any fetch
            sources = []

        if Source.APP_STORE in sources and not self.apple_id:
            missing.append("APPLE_ID")
        if Source.GOOGLE_PLAY in sources:
            if not self.google_package_name:
                missing.append("GOOGLE_PLAY_PACKAGE_NAME")
            if not self.google_key_path:
                missing.append("GOOGLE_PLAY_JSON_KEY_PATH")

        if missing:
            raise ConfigError(
                f"Missing required settings: {', '.join(missing)}. "
                "Define them in the environment or in .env"
            )
