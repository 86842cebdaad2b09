"""
Run configuration sources.

A RunConfig is resolved once, before the orchestrator runs: each value comes
from its command-line flag, else from an interactive prompt (when prompting
is allowed), else from a default. The pipeline itself never prompts.
"""

import logging
from typing import Callable, Optional

from review_relay.errors import ConfigError
from review_relay.models.run_config import RunConfig, RunMode, WatermarkStrategy

logger = logging.getLogger(__name__)

YES_VALUES = ("yes", "y", "true", "1")
NO_VALUES = ("no", "n", "false", "0")


def parse_yes_no(value: str) -> bool:
    """
    Parse a yes/no answer.

    Raises:
        ValueError: if the value is neither
    """
    normalized = value.strip().lower()
    if normalized in YES_VALUES:
        return True
    if normalized in NO_VALUES:
        return False
    raise ValueError(f"Expected yes or no, got {value!r}")


class ConfigSource:
    """
    Supplies run settings. Every getter returns None when this source has
    no value, so the next source in line is consulted.
    """

    def store(self) -> Optional[str]:
        return None

    def mode(self) -> Optional[RunMode]:
        return None

    def max_count(self) -> Optional[int]:
        return None

    def ignore_watermark(self) -> Optional[bool]:
        return None

    def deliver_to_webhook(self) -> Optional[bool]:
        return None

    def debug(self) -> Optional[bool]:
        return None

    def watermark_strategy(self) -> Optional[WatermarkStrategy]:
        return None


class FlagConfigSource(ConfigSource):
    """Values from parsed command-line flags (argparse namespace)."""

    def __init__(self, namespace):
        self.namespace = namespace

    def _get(self, name: str):
        return getattr(self.namespace, name, None)

    def store(self) -> Optional[str]:
        return self._get("store")

    def mode(self) -> Optional[RunMode]:
        value = self._get("mode")
        return RunMode(value) if value is not None else None

    def max_count(self) -> Optional[int]:
        return self._get("reviews")

    def ignore_watermark(self) -> Optional[bool]:
        return self._get("ignore_last_run")

    def deliver_to_webhook(self) -> Optional[bool]:
        return self._get("send_to_slack")

    def debug(self) -> Optional[bool]:
        return self._get("debug")

    def watermark_strategy(self) -> Optional[WatermarkStrategy]:
        value = self._get("watermark_strategy")
        return WatermarkStrategy(value) if value is not None else None


class PromptConfigSource(ConfigSource):
    """Values asked interactively, one question per missing setting."""

    def __init__(self, input_fn: Callable[[str], str] = input, slack_channel: str = ""):
        """
        Args:
            input_fn: Reads one answer for a prompt (builtin input by default)
            slack_channel: Channel name shown in the Slack question
        """
        self.input_fn = input_fn
        self.slack_channel = slack_channel

    def _ask(self, question: str) -> str:
        return self.input_fn(question).strip()

    def _ask_yes_no(self, question: str) -> bool:
        # Anything other than an explicit yes is a no
        return self._ask(question).lower() in YES_VALUES

    def store(self) -> Optional[str]:
        return self._ask("Which app store do you want to retrieve reviews from? (apple/google/both): ").lower()

    def mode(self) -> Optional[RunMode]:
        answer = self._ask("Run in test mode or production mode? (test/prod): ").lower()
        return RunMode.TEST if answer == RunMode.TEST.value else RunMode.PROD

    def max_count(self) -> Optional[int]:
        answer = self._ask("How many of the latest reviews would you like to retrieve? ")
        try:
            count = int(answer)
        except ValueError:
            return 1
        return count if count >= 1 else 1

    def ignore_watermark(self) -> Optional[bool]:
        return self._ask_yes_no(
            "Do you want to ignore the last run timestamp and retrieve the latest reviews regardless? (yes/no): "
        )

    def deliver_to_webhook(self) -> Optional[bool]:
        return self._ask_yes_no(
            f"Do you want to send the reviews to Slack? (yes/no) [Channel: {self.slack_channel}] "
        )

    def debug(self) -> Optional[bool]:
        return self._ask_yes_no("Enable debug mode? (yes/no): ")


def resolve_run_config(
    flags: ConfigSource,
    prompt: Optional[ConfigSource] = None,
    default_watermark_strategy: WatermarkStrategy = WatermarkStrategy.NOW
) -> RunConfig:
    """
    Build the RunConfig for this run.

    Settings are resolved in the order the interactive session asks them.
    Without a prompt source, omitted flags fall back to defaults: no store,
    prod mode, all reviews, honour the watermark, no Slack, no debug.

    Raises:
        ConfigError: if the resolved values are invalid
    """
    def pick(name: str, default):
        value = getattr(flags, name)()
        if value is None and prompt is not None:
            value = getattr(prompt, name)()
        return default if value is None else value

    store = pick("store", "")
    mode = pick("mode", RunMode.PROD)
    max_count = pick("max_count", None)
    ignore_watermark = pick("ignore_watermark", False)
    deliver_to_webhook = pick("deliver_to_webhook", False)
    debug = pick("debug", False)
    # Not prompted: flag or configured default
    watermark_strategy = flags.watermark_strategy() or default_watermark_strategy

    try:
        run_config = RunConfig(
            store=store,
            max_count=max_count,
            ignore_watermark=ignore_watermark,
            deliver_to_webhook=deliver_to_webhook,
            debug=debug,
            mode=mode,
            watermark_strategy=watermark_strategy
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid run configuration: {e}") from e

    logger.debug(f"Resolved run configuration: {run_config}")
    return run_config
