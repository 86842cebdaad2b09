"""
ReviewRelay - App Store and Google Play review relay

CLI entry point for a single review-delivery run.
"""

import argparse
import logging
import sys

import config.settings as settings
from review_relay.config_source import (
    FlagConfigSource,
    PromptConfigSource,
    parse_yes_no,
    resolve_run_config
)
from review_relay.errors import ConfigError
from review_relay.models.run_config import RunMode, ServiceConfig, StoreChoice, WatermarkStrategy
from review_relay.orchestrator import PipelineOrchestrator
from review_relay.utils.watermark import format_watermark


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ],
        force=True
    )


def _yes_no(value: str) -> bool:
    try:
        return parse_yes_no(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _positive_int(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a whole number, got {value!r}")
    if count < 1:
        raise argparse.ArgumentTypeError(f"Review count must be >= 1, got {count}")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ReviewRelay - deliver new App Store and Google Play reviews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Latest 5 reviews from both stores, newer than the last run, posted to Slack
  python main.py --store both --reviews 5 --ignore-last-run no --send-to-slack yes

  # Dry look at the 3 newest Google Play reviews without touching the timestamp
  python main.py --store google --mode test --reviews 3 --send-to-slack no

Any omitted option is asked interactively unless --no-prompt is given.
Set SLACK_BOT_TOKEN, SLACK_CHANNEL, APPLE_ID, GOOGLE_PLAY_PACKAGE_NAME and
GOOGLE_PLAY_JSON_KEY_PATH in the environment or in .env.
        """
    )

    parser.add_argument(
        "--store",
        type=str.lower,
        choices=[c.value for c in StoreChoice],
        help="Which store to read reviews from"
    )

    parser.add_argument(
        "--mode",
        type=str.lower,
        choices=[m.value for m in RunMode],
        help="test: ignore and keep the last run timestamp; prod: normal run"
    )

    parser.add_argument(
        "--reviews",
        type=_positive_int,
        help="Maximum number of latest reviews to deliver per store"
    )

    parser.add_argument(
        "--ignore-last-run",
        type=_yes_no,
        metavar="yes|no",
        help="Deliver the latest reviews regardless of the last run timestamp"
    )

    parser.add_argument(
        "--send-to-slack",
        type=_yes_no,
        metavar="yes|no",
        help="Post each review to the configured Slack channel"
    )

    parser.add_argument(
        "--debug",
        type=_yes_no,
        metavar="yes|no",
        help="Log the full vendor payload of each delivered review"
    )

    parser.add_argument(
        "--watermark-strategy",
        choices=[s.value for s in WatermarkStrategy],
        help=f"How the last run timestamp is advanced (default: {settings.WATERMARK_STRATEGY})"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never prompt; omitted options take their defaults"
    )

    return parser


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        service_config = ServiceConfig.from_settings(settings)
        default_strategy = WatermarkStrategy(settings.WATERMARK_STRATEGY.strip().lower())
    except (ConfigError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    prompt = None
    if not args.no_prompt:
        prompt = PromptConfigSource(slack_channel=service_config.slack_channel)

    try:
        run_config = resolve_run_config(
            FlagConfigSource(args),
            prompt=prompt,
            default_watermark_strategy=default_strategy
        )
        service_config.validate(run_config)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print("\n⚠️  Cancelled")
        sys.exit(1)

    if run_config.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Print banner
    print("=" * 60)
    print("ReviewRelay - App Store Review Relay")
    print("=" * 60)
    print(f"Store: {run_config.store}")
    print(f"Mode: {run_config.mode.value}")
    print(f"Reviews: {run_config.max_count or 'all'}")
    print(f"Ignore last run: {'yes' if run_config.ignore_watermark else 'no'}")
    print(f"Send to Slack: {'yes' if run_config.deliver_to_webhook else 'no'}")
    print("=" * 60)
    print()

    try:
        orchestrator = PipelineOrchestrator(
            run_config=run_config,
            service_config=service_config
        )
        summary = orchestrator.run()

    except ConfigError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        print("\n⚠️  Run interrupted")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Run failed: {e}", exc_info=True)
        print(f"\n❌ Run failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)

    print()
    print("=" * 60)
    print(f"✅ Run completed: {summary.selected} review(s) emitted")
    if run_config.deliver_to_webhook:
        print(f"Slack: {summary.delivered} sent, {summary.failed_deliveries} failed")
    for source in summary.failed_sources:
        print(f"⚠️  {source.store_name}: fetch failed, see log")
    if summary.new_watermark is not None:
        print(f"Last run timestamp: {format_watermark(summary.new_watermark)}")
    print("=" * 60)

    logger.info("ReviewRelay completed successfully")
    sys.exit(0)


if __name__ == "__main__":
    main()
