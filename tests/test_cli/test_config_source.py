"""
Tests for run configuration resolution (flags, prompts, defaults).
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from main import build_parser, main
from review_relay.config_source import (
    FlagConfigSource,
    PromptConfigSource,
    parse_yes_no,
    resolve_run_config
)
from review_relay.errors import ConfigError
from review_relay.models.review import Source
from review_relay.models.run_config import (
    RunConfig,
    RunMode,
    ServiceConfig,
    StoreChoice,
    WatermarkStrategy
)


class ScriptedInput:
    """Answers prompts in order and records the questions asked."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.questions = []

    def __call__(self, question):
        self.questions.append(question)
        return self.answers.pop(0)


def test_flags_only():
    args = build_parser().parse_args([
        "--store", "Both", "--mode", "test", "--reviews", "3",
        "--ignore-last-run", "yes", "--send-to-slack", "no", "--debug", "no",
        "--watermark-strategy", "max_seen",
    ])

    config = resolve_run_config(FlagConfigSource(args))

    assert config == RunConfig(
        store="both",
        max_count=3,
        ignore_watermark=True,
        deliver_to_webhook=False,
        debug=False,
        mode=RunMode.TEST,
        watermark_strategy=WatermarkStrategy.MAX_SEEN
    )


def test_prompts_only_for_missing_values():
    args = build_parser().parse_args(["--store", "apple", "--reviews", "2", "--debug", "no"])
    scripted = ScriptedInput(["prod", "no", "yes"])
    prompt = PromptConfigSource(input_fn=scripted, slack_channel="#reviews")

    config = resolve_run_config(FlagConfigSource(args), prompt=prompt)

    assert len(scripted.questions) == 3
    assert "test/prod" in scripted.questions[0]
    assert "ignore the last run timestamp" in scripted.questions[1]
    assert "[Channel: #reviews]" in scripted.questions[2]
    assert config.store == "apple"
    assert config.mode is RunMode.PROD
    assert config.ignore_watermark is False
    assert config.deliver_to_webhook is True


def test_prompt_answers_full_session():
    scripted = ScriptedInput(["Google", "test", "abc", "YES", "no", "y"])

    config = resolve_run_config(
        FlagConfigSource(build_parser().parse_args([])),
        prompt=PromptConfigSource(input_fn=scripted)
    )

    assert config.store == "google"
    assert config.mode is RunMode.TEST
    assert config.max_count == 1  # unparsable count falls back to 1
    assert config.ignore_watermark is True
    assert config.deliver_to_webhook is False
    assert config.debug is True


def test_no_prompt_uses_defaults():
    config = resolve_run_config(
        FlagConfigSource(build_parser().parse_args(["--store", "google", "--no-prompt"])),
        default_watermark_strategy=WatermarkStrategy.MAX_SEEN
    )

    assert config.max_count is None
    assert config.mode is RunMode.PROD
    assert config.ignore_watermark is False
    assert config.deliver_to_webhook is False
    assert config.watermark_strategy is WatermarkStrategy.MAX_SEEN


def test_invalid_flag_values_rejected_by_parser():
    parser = build_parser()
    for argv in (["--reviews", "0"], ["--send-to-slack", "maybe"], ["--store", "windows"]):
        with pytest.raises(SystemExit):
            parser.parse_args(argv)


def test_parse_yes_no():
    assert parse_yes_no(" Yes ") is True
    assert parse_yes_no("no") is False
    with pytest.raises(ValueError):
        parse_yes_no("perhaps")


def test_run_config_rejects_non_positive_count():
    with pytest.raises(ConfigError):
        RunConfig(store="apple", max_count=0)


def test_store_choice_sources():
    assert StoreChoice.APPLE.sources == [Source.APP_STORE]
    assert StoreChoice.BOTH.sources == [Source.APP_STORE, Source.GOOGLE_PLAY]


def test_service_config_requires_slack_only_when_delivering():
    service = ServiceConfig(apple_id="123")

    service.validate(RunConfig(store="apple"))

    with pytest.raises(ConfigError, match="SLACK_BOT_TOKEN"):
        service.validate(RunConfig(store="apple", deliver_to_webhook=True))


def test_service_config_requires_store_credentials():
    with pytest.raises(ConfigError) as exc_info:
        ServiceConfig().validate(RunConfig(store="both"))

    message = str(exc_info.value)
    assert "APPLE_ID" in message
    assert "GOOGLE_PLAY_PACKAGE_NAME" in message
    assert "GOOGLE_PLAY_JSON_KEY_PATH" in message


def make_settings(**overrides):
    values = dict(
        SLACK_BOT_TOKEN="xoxb", SLACK_CHANNEL="#c", APPLE_ID="1",
        GOOGLE_PLAY_PACKAGE_NAME="com.x", GOOGLE_PLAY_JSON_KEY_PATH="k.json",
        IOS_APP_NAME="iOS", ANDROID_APP_NAME="Android",
        WATERMARK_PATH="state/last.txt", DISPLAY_TIMEZONE="UTC",
        HTTP_TIMEOUT_SECONDS="10", WATERMARK_STRATEGY="now", LOG_LEVEL="INFO"
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_service_config_from_settings():
    settings = make_settings()

    service = ServiceConfig.from_settings(settings)

    assert service.watermark_path == Path("state/last.txt")
    assert service.google_package_name == "com.x"
    assert service.http_timeout == 10.0


def test_service_config_rejects_bad_timeout():
    for value in ("abc", "", "0", "-5"):
        with pytest.raises(ConfigError, match="HTTP_TIMEOUT_SECONDS"):
            ServiceConfig.from_settings(make_settings(HTTP_TIMEOUT_SECONDS=value))


def test_main_exits_cleanly_on_bad_timeout():
    with patch("main.settings", make_settings(HTTP_TIMEOUT_SECONDS="thirty")), \
            patch("main.setup_logging"), \
            patch("main.PipelineOrchestrator") as mock_orchestrator, \
            patch.object(sys, "argv", ["main.py", "--store", "apple", "--no-prompt"]):
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 1
    mock_orchestrator.assert_not_called()
