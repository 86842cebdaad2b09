"""
Pipeline Orchestrator.

Coordinates one review-delivery run across the selected stores.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from review_relay.delivery.dispatcher import ReviewDispatcher
from review_relay.delivery.slack import SlackClient
from review_relay.errors import ConfigError, FetchError
from review_relay.models.review import EPOCH, Review, Source
from review_relay.models.run_config import RunConfig, ServiceConfig, StoreChoice, WatermarkStrategy
from review_relay.processing.formatting import ReviewFormatter
from review_relay.processing.normalization import ReviewNormalizer
from review_relay.processing.selection import newest_timestamp, select_reviews
from review_relay.sources.app_store import AppStoreSource
from review_relay.sources.base import SourceAdapter
from review_relay.sources.google_play import GooglePlaySource
from review_relay.utils.watermark import WatermarkStore, format_watermark

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass
class SourceResult:
    """Outcome of processing one source."""
    source: Source
    fetched: int = 0
    selected: int = 0
    skipped: int = 0
    failed: bool = False
    error: Optional[str] = None


@dataclass
class RunSummary:
    """Outcome of one run."""
    previous_watermark: datetime
    new_watermark: Optional[datetime] = None
    watermark_saved: bool = False
    results: List[SourceResult] = field(default_factory=list)
    delivered: int = 0
    failed_deliveries: int = 0

    @property
    def selected(self) -> int:
        return sum(r.selected for r in self.results)

    @property
    def failed_sources(self) -> List[Source]:
        return [r.source for r in self.results if r.failed]


class PipelineOrchestrator:
    """
    Orchestrates a single run.

    Flow per selected source (App Store first, then Google Play):
    Fetch -> Normalize -> Select -> Format -> Dispatch

    After all sources: Watermark update
    """

    def __init__(
        self,
        run_config: RunConfig,
        service_config: ServiceConfig,
        sources: Optional[Dict[Source, SourceAdapter]] = None,
        watermark_store: Optional[WatermarkStore] = None,
        normalizer: Optional[ReviewNormalizer] = None,
        formatter: Optional[ReviewFormatter] = None,
        dispatcher: Optional[ReviewDispatcher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the orchestrator.

        Collaborators that are not passed in are built from service_config.

        Args:
            run_config: Per-run choices
            service_config: Credentials and environment-derived values
            sources: Source adapters by source (built lazily on first use)
            watermark_store: Watermark persistence
            normalizer: Raw record -> Review mapper
            formatter: Review renderer
            dispatcher: Console/Slack emitter
            clock: Returns the current UTC instant
        """
        self.run_config = run_config
        self.service_config = service_config
        self.sources = dict(sources) if sources is not None else {}

        self.watermark_store = watermark_store or WatermarkStore(service_config.watermark_path)
        self.normalizer = normalizer or ReviewNormalizer(
            google_package_name=service_config.google_package_name
        )
        self.formatter = formatter or ReviewFormatter(
            display_timezone=service_config.display_timezone,
            ios_app_name=service_config.ios_app_name,
            android_app_name=service_config.android_app_name
        )

        if dispatcher is None:
            slack_client = None
            if run_config.deliver_to_webhook:
                slack_client = SlackClient(
                    token=service_config.slack_token,
                    channel=service_config.slack_channel,
                    timeout=service_config.http_timeout
                )
            dispatcher = ReviewDispatcher(slack_client=slack_client)
        self.dispatcher = dispatcher

        self.clock = clock or _utc_now

    def run(self) -> RunSummary:
        """
        Run the pipeline.

        Returns:
            RunSummary describing what was fetched, delivered and persisted

        Raises:
            ConfigError: if the store selection is invalid (nothing is fetched)
        """
        selected_sources = self._resolve_sources()

        if self.run_config.is_test_mode:
            logger.info("Test mode: last run timestamp is ignored and will not be updated")
            watermark = EPOCH
        else:
            watermark = self.watermark_store.load()

        summary = RunSummary(previous_watermark=watermark)
        delivered_reviews: List[Review] = []

        logger.info(
            f"Starting run for {', '.join(s.store_name for s in selected_sources)} "
            f"(reviews={self.run_config.max_count or 'all'}, "
            f"ignore_last_run={self.run_config.ignore_watermark}, "
            f"send_to_slack={self.run_config.deliver_to_webhook})"
        )

        for source in selected_sources:
            result, delivered = self._process_single_source(source, watermark)
            summary.results.append(result)
            delivered_reviews.extend(delivered)

        summary.delivered = self.dispatcher.delivered
        summary.failed_deliveries = self.dispatcher.failed_deliveries

        if self.run_config.is_test_mode:
            return summary

        # Rewritten even when nothing new was delivered
        new_watermark = self._next_watermark(watermark, delivered_reviews)
        summary.new_watermark = new_watermark
        summary.watermark_saved = self.watermark_store.save(new_watermark)

        logger.info(
            f"Run complete: {summary.selected} reviews emitted, "
            f"{summary.delivered} sent to Slack, {summary.failed_deliveries} failed deliveries, "
            f"last run timestamp {format_watermark(new_watermark)}"
        )
        return summary

    def _resolve_sources(self) -> List[Source]:
        try:
            choice = StoreChoice(self.run_config.store)
        except ValueError:
            raise ConfigError(
                f"Invalid store choice {self.run_config.store!r}. "
                "Please choose from apple, google, or both."
            ) from None
        return choice.sources

    def _process_single_source(self, source: Source, watermark: datetime):
        """
        Fetch, select and emit the reviews of one source.

        A fetch failure is logged and the source contributes nothing.
        A record that cannot be normalized is logged and skipped.

        Returns:
            (SourceResult, list of emitted reviews)
        """
        result = SourceResult(source=source)

        try:
            raw_records = self._get_source(source).fetch()
        except FetchError as e:
            logger.error(f"{source.store_name}: {e}")
            result.failed = True
            result.error = str(e)
            return result, []

        result.fetched = len(raw_records)
        self.dispatcher.announce(self.formatter.format_header(source))

        if not raw_records:
            self.dispatcher.announce(self.formatter.no_reviews_notice(source))
            return result, []

        reviews = []
        for raw in raw_records:
            try:
                reviews.append(self.normalizer.normalize(source, raw))
            except Exception as e:
                logger.warning(f"{source.store_name}: skipping malformed review record: {e}")
                result.skipped += 1

        selected = select_reviews(
            reviews,
            watermark=watermark,
            max_count=self.run_config.max_count,
            ignore_watermark=not self.run_config.uses_watermark
        )
        result.selected = len(selected)

        if not selected:
            self.dispatcher.announce(self.formatter.no_new_reviews_notice(source))
            return result, []

        for review in selected:
            text = self.formatter.format_review(review)
            self.dispatcher.emit(review, text, self.run_config.deliver_to_webhook)
            if self.run_config.debug:
                logger.debug(
                    f"Full review object: {json.dumps(review.raw, indent=2, default=str)}"
                )

        logger.info(f"{source.store_name}: {len(selected)} of {len(reviews)} reviews emitted")
        return result, selected

    def _next_watermark(self, previous: datetime, delivered: List[Review]) -> datetime:
        if self.run_config.watermark_strategy is WatermarkStrategy.MAX_SEEN:
            newest = newest_timestamp(delivered)
            if newest is None or newest <= previous:
                return previous
            return newest
        return self.clock()

    def _get_source(self, source: Source) -> SourceAdapter:
        """Return the adapter for source, building it from service_config if needed."""
        if source not in self.sources:
            if source is Source.APP_STORE:
                self.sources[source] = AppStoreSource(
                    app_id=self.service_config.apple_id,
                    timeout=self.service_config.http_timeout
                )
            else:
                self.sources[source] = GooglePlaySource(
                    package_name=self.service_config.google_package_name,
                    key_path=self.service_config.google_key_path
                )
        return self.sources[source]
