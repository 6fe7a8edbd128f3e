import pytest

from core.errors import AppErrorException, ErrorCode
from engines.course import Course, create_course
from engines.schedule import Chorus
from engines.store import InMemorySentenceStore, Sentence

from conftest import fill_pack, make_course


def _indices(sentence_set) -> list[int]:
    return [group.index for group in sentence_set.groups]


def _advance(course: Course, days: int) -> None:
    for _ in range(days):
        course.prepare_next_day()
        course.complete_current_day()


def test_first_day_introduces_one_batch(course: Course) -> None:
    day = course.prepare_next_day()

    assert len(day.sentence_sets) == 1
    new_set = day.sentence_sets[0]
    assert new_set.first_day
    assert _indices(new_set) == [1, 2, 3]
    assert [item.sentence.text for item in new_set.sentences[:2]] == ["EN basics 1", "ES basics 1"]
    assert day.total_reviews == 6
    assert course.schedule.sentence_index == 3
    assert course.past_days == []


def test_days_progress_until_content_runs_out(course: Course) -> None:
    days = []
    for _ in range(5):
        days.append(course.prepare_next_day())
        course.complete_current_day()

    day2, day3, day4, day5 = days[1:]
    assert [_indices(s) for s in day2.sentence_sets] == [[1, 2, 3], [4, 5, 6]]
    assert [_indices(s) for s in day3.sentence_sets] == [[4, 5, 6], [1, 2, 3], [7, 8, 9]]
    assert [_indices(s) for s in day4.sentence_sets] == [[7, 8, 9], [4, 5, 6], [1, 2, 3], [10]]

    # the fifth batch is past the end and gets pruned; reviews continue
    assert [_indices(s) for s in day5.sentence_sets] == [[10], [7, 8, 9], [4, 5, 6], [1, 2, 3]]
    assert day5.introduced_set is None
    assert not course.is_complete
    assert course.schedule.sentence_index == 15


def test_carry_forward_keeps_set_identity_and_moves_latest_first(course: Course) -> None:
    _advance(course, 3)
    day3 = course.current_day
    a, b, c = day3.sentence_sets

    day4 = course.prepare_next_day()
    carried = day4.sentence_sets[:3]
    assert [s.id for s in carried] == [c.id, a.id, b.id]
    assert all(not s.first_day for s in carried)
    assert day4.sentence_sets[3].first_day
    # yesterday's objects are untouched
    assert day3.sentence_sets == [a, b, c]
    assert c.first_day


def test_sets_retire_when_review_pattern_hits_zero(store: InMemorySentenceStore) -> None:
    course = make_course(store, ["EN", "ES"], ["basics"], num_sentences=5, reviews=[2, 0])

    day1 = course.prepare_next_day()
    assert day1.total_reviews == 5 * 2 * 2
    course.complete_current_day()

    day2 = course.prepare_next_day()
    assert [_indices(s) for s in day2.sentence_sets] == [[6, 7, 8, 9, 10]]
    course.complete_current_day()

    day3 = course.prepare_next_day()
    assert day3.is_empty
    assert course.is_complete


def test_num_sentences_seen_counts_each_sentence_once(course: Course) -> None:
    _advance(course, 5)

    assert course.num_sentences_seen == 10
    assert len(course.past_days) == 4
    assert course.current_day.completed


def test_uncompleted_day_is_not_archived(course: Course) -> None:
    course.prepare_next_day()
    course.prepare_next_day()

    assert course.past_days == []
    assert course.num_sentences_seen == 0
    assert [_indices(s) for s in course.current_day.sentence_sets] == [[1, 2, 3], [4, 5, 6]]


def test_total_reps_includes_progress_on_current_day(course: Course) -> None:
    course.prepare_next_day()
    course.current_day.record_review(2)
    assert course.total_reps == 2

    course.complete_current_day()
    assert course.num_reps == 2
    assert course.total_reps == 2

    course.prepare_next_day()
    course.add_reps(5)
    course.current_day.record_review(1)
    assert course.total_reps == 8


def test_complete_current_day_rejects_bad_state(course: Course) -> None:
    with pytest.raises(AppErrorException) as exc:
        course.complete_current_day()
    assert exc.value.error.code == ErrorCode.E5002_STATE_CONFLICT

    course.prepare_next_day()
    course.complete_current_day()
    with pytest.raises(AppErrorException) as exc:
        course.complete_current_day()
    assert exc.value.error.code == ErrorCode.E5002_STATE_CONFLICT


@pytest.mark.parametrize(
    ("cursor", "expected"),
    [
        (1, ["EN a 2", "EN a 3", "EN b 1", "EN b 2"]),
        (4, ["EN b 2", "EN b 3", "EN b 4", "EN b 5"]),
        (6, ["EN b 4", "EN b 5"]),
    ],
)
def test_batches_page_across_packs(
    store: InMemorySentenceStore, cursor: int, expected: list[str]
) -> None:
    for language in ("EN", "ES"):
        fill_pack(store, language, "a", 3)
        fill_pack(store, language, "b", 5)
    course = make_course(store, ["EN", "ES"], ["a", "b"], num_sentences=4)
    course.schedule.set_sentence_index(cursor)

    new_set = course.prepare_next_day().introduced_set

    assert [g.sentences[0].text for g in new_set.groups] == expected
    assert [g.sentences[1].text for g in new_set.groups] == [t.replace("EN", "ES") for t in expected]
    assert _indices(new_set) == list(range(cursor + 1, cursor + 1 + len(expected)))


def test_batch_past_all_packs_is_pruned(store: InMemorySentenceStore) -> None:
    for language in ("EN", "ES"):
        fill_pack(store, language, "a", 3)
        fill_pack(store, language, "b", 5)
    course = make_course(store, ["EN", "ES"], ["a", "b"], num_sentences=4)
    course.schedule.set_sentence_index(8)

    day = course.prepare_next_day()

    assert day.is_empty
    assert course.is_complete
    assert course.schedule.sentence_index == 12


def test_misaligned_packs_produce_incomplete_groups(store: InMemorySentenceStore) -> None:
    fill_pack(store, "EN", "short", 3)
    fill_pack(store, "ES", "short", 2)
    course = make_course(store, ["EN", "ES"], ["short"])

    day = course.prepare_next_day()
    groups = day.introduced_set.groups

    assert [g.is_complete for g in groups] == [True, True, False]
    assert groups[2].missing_languages == ["ES"]
    assert day.total_reviews == 5


def test_misaligned_books_never_pair_sentences_across_books(store: InMemorySentenceStore) -> None:
    fill_pack(store, "EN", "a", 3)
    fill_pack(store, "EN", "b", 3)
    fill_pack(store, "ES", "a", 2)
    fill_pack(store, "ES", "b", 3)
    course = make_course(store, ["EN", "ES"], ["a", "b"], num_sentences=4)

    def texts(sentence_set):
        return [tuple(s.text if s else None for s in g.sentences) for g in sentence_set.groups]

    first = course.prepare_next_day().introduced_set
    assert texts(first) == [("EN a 1", "ES a 1"), ("EN a 2", "ES a 2"), ("EN a 3", None), ("EN b 1", "ES b 1")]
    assert [g.is_complete for g in first.groups] == [True, True, False, True]
    assert _indices(first) == [1, 2, 3, 4]

    course.complete_current_day()
    second = course.prepare_next_day().introduced_set
    assert texts(second) == [("EN b 2", "ES b 2"), ("EN b 3", "ES b 3")]
    assert _indices(second) == [5, 6]


def test_holes_in_a_pack_are_reported_not_skipped(store: InMemorySentenceStore) -> None:
    gappy = store.add_pack("EN", "gappy")
    for index in (1, 2, 5):
        gappy.create_sentence_or_update(index, text=f"EN {index}")
    fill_pack(store, "ES", "gappy", 5)
    course = make_course(store, ["EN", "ES"], ["gappy"], num_sentences=5)

    groups = course.prepare_next_day().introduced_set.groups

    assert [g.is_complete for g in groups] == [True, True, False, False, True]
    assert groups[4].sentences[0].text == "EN 5"


def test_finite_review_pattern_lets_the_course_finish(store: InMemorySentenceStore) -> None:
    course = make_course(store, ["EN", "ES"], ["basics"], num_sentences=3, reviews=[4, 3, 2, 1])

    first = course.prepare_next_day()
    assert first.total_reviews == 3 * 2 * 4
    course.complete_current_day()
    for _ in range(6):
        day = course.prepare_next_day()
        assert not day.is_empty
        assert len(day.sentence_sets) <= 4
        course.complete_current_day()

    # the set introduced on day 4 retires after its fourth study day
    last = course.prepare_next_day()
    assert last.is_empty
    assert course.is_complete
    assert course.num_sentences_seen == 10


@pytest.mark.parametrize(
    ("kwargs", "code"),
    [
        ({"num_sentences": 0}, ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
        ({"order": "012"}, ErrorCode.E2031_COURSE_MISCONFIGURED),
        ({"reviews": [1, -1]}, ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
    ],
)
def test_misconfigured_course_fails_without_mutation(
    store: InMemorySentenceStore, kwargs: dict, code: ErrorCode
) -> None:
    course = make_course(store, ["EN", "ES"], ["basics"], **kwargs)

    with pytest.raises(AppErrorException) as exc:
        course.prepare_next_day()

    assert exc.value.error.code == code
    assert course.current_day is None
    assert course.schedule.sentence_index == 0


def test_language_without_packs_is_misconfigured(store: InMemorySentenceStore) -> None:
    languages = [store.get_language("EN"), store.get_language("ES")]
    course = Course("test", languages, [store.get_pack("EN", "basics")])

    result = course.validate()
    assert result.is_err()
    assert result.unwrap_err().code == ErrorCode.E2031_COURSE_MISCONFIGURED


def test_failed_preparation_restores_cursor(course: Course, monkeypatch: pytest.MonkeyPatch) -> None:
    course.prepare_next_day()
    day1 = course.current_day

    def boom(self, start, n):
        raise RuntimeError("content unavailable")

    monkeypatch.setattr(Course, "_sentence_groups", boom)
    with pytest.raises(RuntimeError):
        course.prepare_next_day()

    assert course.schedule.sentence_index == 3
    assert course.current_day is day1


def test_set_starting_sentence_moves_next_batch(course: Course) -> None:
    course.prepare_next_day()
    course.set_starting_sentence_for_all_schedules(Sentence(7))

    day = course.prepare_next_day()

    assert _indices(day.introduced_set) == [7, 8, 9]
    with pytest.raises(AppErrorException) as exc:
        course.set_starting_sentence(0)
    assert exc.value.error.code == ErrorCode.E2003_OUT_OF_RANGE


def test_pause_applies_to_current_and_future_days(course: Course) -> None:
    course.prepare_next_day()
    course.pause_millis = 750

    assert course.current_day.pause_millis == 750
    course.complete_current_day()
    assert course.prepare_next_day().pause_millis == 750


def test_create_course_resolves_content(store: InMemorySentenceStore) -> None:
    result = create_course(
        store,
        ["EN", "ES"],
        ["basics"],
        sentences_per_day=4,
        reviews=[3, 2],
        starting_sentence=5,
        chorus=Chorus.ALL,
    )

    course = result.unwrap()
    assert course.title == "English → Spanish"
    assert course.schedule.order == "011"
    assert course.schedule.sentence_index == 4
    assert _indices(course.prepare_next_day().introduced_set) == [5, 6, 7, 8]


@pytest.mark.parametrize(
    ("language_ids", "books", "options", "code"),
    [
        (["EN", "FR"], ["basics"], {}, ErrorCode.E4010_NOT_FOUND),
        (["EN", "ES"], ["travel"], {}, ErrorCode.E4010_NOT_FOUND),
        (["EN", "ES"], ["basics"], {"starting_sentence": 0}, ErrorCode.E2003_OUT_OF_RANGE),
        (["EN", "ES"], ["basics"], {"sentences_per_day": 0}, ErrorCode.E2030_SCHEDULE_MISCONFIGURED),
    ],
)
def test_create_course_errors(
    store: InMemorySentenceStore, language_ids, books, options, code
) -> None:
    kwargs = {"sentences_per_day": 3, "reviews": []}
    kwargs.update(options)

    result = create_course(store, language_ids, books, **kwargs)

    assert result.is_err()
    assert result.unwrap_err().code == code
