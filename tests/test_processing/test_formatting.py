"""
Unit tests for the Review Formatter.
"""

from datetime import datetime, timezone

import pytest

from review_relay.models.review import Review, Source
from review_relay.processing.formatting import DETAIL_SEPARATOR, SEPARATOR, ReviewFormatter


@pytest.fixture
def formatter():
    return ReviewFormatter(
        display_timezone="America/Los_Angeles",
        ios_app_name="iOS Test App",
        android_app_name="Android Test App"
    )


def test_app_store_review_layout(formatter):
    review = Review(
        source=Source.APP_STORE,
        timestamp=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        rating=4,
        text="Solid app",
        author="tennisfan",
        title="Nice",
        version="4.2.1",
        identifier="1122",
        link="https://itunes.apple.com/us/review?id=1",
        extra={"country": "US", "vote_count": 3, "vote_sum": 7}
    )

    assert formatter.format_review(review) == "\n".join([
        "*iOS App Review:* v4.2.1",
        "*Date:* June 01, 2024, 05:00 AM",
        "*Rating:* 4/5",
        "*Title:* Nice",
        "*Detail:* Solid app",
        DETAIL_SEPARATOR,
        "*by:* tennisfan",
        "*Country:* US",
        "*Helpful Votes:* 3 (Total: 7)",
        "*Review ID:* 1122",
        "*Review Link:* https://itunes.apple.com/us/review?id=1",
        "",
        SEPARATOR,
    ])


def test_google_play_review_layout(formatter):
    review = Review(
        source=Source.GOOGLE_PLAY,
        timestamp=datetime(2024, 1, 15, 21, 45, tzinfo=timezone.utc),
        rating=1,
        text="Crashes",
        author="Jane",
        version="4.2.0",
        identifier="gp:1",
        link="https://play.google.com/store/apps/details?id=com.example.app&reviewId=gp:1",
        extra={
            "thumbs_up": 2,
            "thumbs_down": 0,
            "language": "en_US",
            "device": "a52q",
            "android_os_version": "33",
            "product_name": "Galaxy A52",
            "manufacturer": "Samsung",
            "screen_density_dpi": 420,
        }
    )

    lines = formatter.format_review(review).split("\n")

    assert lines[0] == "*Android App Review:* v4.2.0"
    assert lines[1] == "*Date:* January 15, 2024, 01:45 PM"
    assert lines[2] == "*Rating:* 1/5"
    assert lines[3] == "*Detail:* Crashes"
    assert "*Thumbs Up:* 2 | *Thumbs Down:* 0" in lines
    assert lines.index("*Language:* en_US") < lines.index("*Device:* a52q")
    assert lines.index("*Device:* a52q") < lines.index("*Android OS Version:* 33")
    assert "*Screen Density DPI:* 420" in lines
    assert lines[-3].startswith("*Review Link:* https://play.google.com/")
    assert lines[-1] == SEPARATOR


def test_absent_fields_are_omitted(formatter):
    review = Review(source=Source.GOOGLE_PLAY, text="Just text", author="Anonymous")

    text = formatter.format_review(review)

    assert text.split("\n")[0] == "*Android App Review:*"
    for label in ("*Date:*", "*Rating:*", "*Title:*", "*Language:*", "*Review ID:*", "*Review Link:*"):
        assert label not in text
    assert "*Thumbs Up:* 0 | *Thumbs Down:* 0" in text


def test_title_only_for_app_store(formatter):
    review = Review(source=Source.GOOGLE_PLAY, title="Should not render")
    assert "*Title:*" not in formatter.format_review(review)


def test_never_emits_empty_label(formatter):
    review = Review(
        source=Source.APP_STORE,
        title="   ",
        version="",
        identifier="",
        extra={"country": "", "vote_count": 0, "vote_sum": 0}
    )

    lines = formatter.format_review(review).split("\n")
    assert lines[0] == "*iOS App Review:*"

    for line in lines[1:]:
        if line.startswith("*"):
            label, _, value = line.partition(":*")
            assert value.strip(), f"empty label rendered: {line!r}"


def test_date_is_independent_of_local_zone(monkeypatch):
    monkeypatch.setenv("TZ", "Asia/Tokyo")
    formatter = ReviewFormatter(display_timezone="America/Los_Angeles")
    instant = datetime(2024, 12, 1, 8, 5, tzinfo=timezone.utc)
    assert formatter.format_date(instant) == "December 01, 2024, 12:05 AM"


def test_header_and_notices(formatter):
    assert formatter.format_header(Source.APP_STORE) == f"{SEPARATOR}\nApp: iOS Test App\n{SEPARATOR}"
    assert "Android Test App" in formatter.no_reviews_notice(Source.GOOGLE_PLAY)
    assert formatter.no_new_reviews_notice(Source.APP_STORE) == (
        "No new reviews have occurred in the Apple App Store since the last run."
    )
