import pytest

from core.errors import ErrorCode
from engines.schedule import (
    Chorus,
    Schedule,
    build_order,
    format_review_pattern,
    parse_review_pattern,
    parse_sentences_per_day,
)


def test_next_batch_returns_previous_cursor_and_advances() -> None:
    schedule = Schedule(num_sentences=5)
    assert schedule.next_batch(5) == (0, 5)
    assert schedule.sentence_index == 5
    assert schedule.next_batch(3) == (5, 3)
    assert schedule.sentence_index == 8


def test_cursor_is_monotonic_over_many_batches() -> None:
    schedule = Schedule()
    previous_start, previous_n = schedule.next_batch(2)
    for n in [1, 4, 7, 3, 10]:
        start, claimed = schedule.next_batch(n)
        assert claimed == n
        assert start == previous_start + previous_n
        assert schedule.sentence_index >= start
        previous_start, previous_n = start, claimed


def test_next_batch_does_not_bound_check_content() -> None:
    schedule = Schedule(sentence_index=9_999)
    assert schedule.next_batch(10) == (9_999, 10)


def test_next_batch_rejects_negative_size() -> None:
    with pytest.raises(ValueError):
        Schedule().next_batch(-1)


def test_set_sentence_index_overrides_cursor() -> None:
    schedule = Schedule()
    schedule.next_batch(10)
    schedule.set_sentence_index(3)
    assert schedule.next_batch(2) == (3, 2)

    with pytest.raises(ValueError):
        schedule.set_sentence_index(-1)


def test_accessors_return_copies() -> None:
    schedule = Schedule(reviews=[4, 3], order="011")
    pattern = schedule.review_pattern()
    pattern.append(1)
    assert schedule.reviews == [4, 3]
    assert schedule.order_strategy() == "011"


@pytest.mark.parametrize(
    ("schedule", "code"),
    [
        (Schedule(num_sentences=0), ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
        (Schedule(num_sentences=-2), ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
        (Schedule(order=""), ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
        (Schedule(order="0a"), ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
        (Schedule(reviews=[2, -1]), ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
    ],
)
def test_validate_rejects_misconfiguration(schedule: Schedule, code: ErrorCode) -> None:
    result = schedule.validate()
    assert result.is_err()
    assert result.unwrap_err().code == code


def test_validate_accepts_defaults() -> None:
    assert Schedule().validate().is_ok()


def test_parse_review_pattern_accepts_mixed_delimiters() -> None:
    assert parse_review_pattern("4 / 3 / 2 / 1") == [4, 3, 2, 1]
    assert parse_review_pattern("5*4.3,2/1") == [5, 4, 3, 2, 1]
    assert parse_review_pattern("  10 x 2 ") == [10, 2]
    assert parse_review_pattern("") == []


def test_parse_review_pattern_clamps_repetitions() -> None:
    assert parse_review_pattern("150 / 3") == [99, 3]
    assert parse_review_pattern("150 / 3", max_repetitions=20) == [20, 3]


def test_format_review_pattern() -> None:
    assert format_review_pattern("") == "? / ? / ?"
    assert format_review_pattern("4,3  2") == "4 / 3 / 2"


def test_parse_sentences_per_day() -> None:
    assert parse_sentences_per_day("12") == 12
    assert parse_sentences_per_day("500") == 100
    assert parse_sentences_per_day("ten") == 0
    assert parse_sentences_per_day("") == 0


def test_build_order_plain_and_chorus() -> None:
    assert build_order(2) == "01"
    assert build_order(3, Chorus.NONE) == "012"
    assert build_order(2, Chorus.ALL) == "011"
    assert build_order(3, Chorus.ALL) == "01122"
    assert build_order(1, Chorus.ALL) == "00"
    assert build_order(2, Chorus.NEW) == "01"
