"""Course Engine

Drives a course day by day: archives the finished day, carries its sets
forward as reviews, claims the next batch of new sentences from the
schedule and prunes sets that have nothing left to play.
"""
from uuid import uuid4

from core.errors import (
    AppError,
    Ok,
    Result,
    course_misconfigured,
    not_found,
    out_of_range,
    raise_result,
    state_conflict,
)
from core.logging import scheduler_logger
from engines.day import Day, prioritize_latest
from engines.schedule import Chorus, Schedule, build_order
from engines.sets import SentenceGroup, SentenceSet
from engines.store import Language, Pack, Sentence, SentenceStore

log = scheduler_logger()


class Course:
    """A study course over one or more languages.

    Not safe for concurrent mutation: callers serialise `prepare_next_day`,
    `add_reps` and cursor overrides per course.
    """

    __slots__ = (
        "id", "title", "languages", "packs", "schedule",
        "current_day", "past_days", "num_reps", "_pause_millis",
    )

    def __init__(
        self,
        title: str,
        languages: list[Language],
        packs: list[Pack],
        schedule: Schedule | None = None,
        pause_millis: int = 0,
        course_id: str | None = None,
    ):
        self.id = course_id or str(uuid4())
        self.title = title
        self.languages = list(languages)
        self.packs = list(packs)
        self.schedule = schedule or Schedule()
        self.current_day: Day | None = None
        self.past_days: list[Day] = []
        self.num_reps = 0
        self._pause_millis = pause_millis

    @property
    def pause_millis(self) -> int:
        return self._pause_millis

    @pause_millis.setter
    def pause_millis(self, value: int) -> None:
        self._pause_millis = value
        if self.current_day is not None:
            self.current_day.pause_millis = value

    def packs_for(self, language: Language) -> list[Pack]:
        """The course's packs owned by `language`, in course pack order."""
        return [pack for pack in self.packs if language.owns(pack)]

    def validate(self) -> Result[None, AppError]:
        """Check the course can advance; nothing is mutated."""
        return self.schedule.validate().and_then(lambda _: self._validate_content())

    def _validate_content(self) -> Result[None, AppError]:
        if not self.languages:
            return course_misconfigured("no languages configured", origin="course", course_id=self.id)
        if not self.packs:
            return course_misconfigured("no packs configured", origin="course", course_id=self.id)
        for language in self.languages:
            if not self.packs_for(language):
                return course_misconfigured(
                    f"language '{language.id}' has no packs in this course",
                    origin="course",
                    course_id=self.id,
                )
        highest = max(int(c) for c in self.schedule.order)
        if highest >= len(self.languages):
            return course_misconfigured(
                f"order '{self.schedule.order}' refers to language {highest} "
                f"but the course has {len(self.languages)}",
                origin="course",
                course_id=self.id,
            )
        return Ok(None)

    # --- advancement ---

    def prepare_next_day(self) -> Day:
        """Advance to the next study day and return it.

        Running out of content is not an error: the new set is empty and
        pruned, and a Day with no sets means the course is done.

        Returns:
            The new current Day, already materialised and pruned

        Raises:
            AppErrorException: E2030/E2031 on misconfiguration, before any
                state is touched
        """
        raise_result(self.validate())

        previous = self.current_day
        saved_index = self.schedule.sentence_index
        try:
            day = Day()
            if previous is not None:
                carried = [s.carried_forward() for s in previous.sentence_sets]
                day.sentence_sets = prioritize_latest(carried)

            start, n = self.schedule.next_batch(self.schedule.num_sentences)
            new_set = SentenceSet(
                groups=self._sentence_groups(start, n),
                reviews=self.schedule.review_pattern(),
                order=self.schedule.order_strategy(),
                first_day=True,
            )
            day.sentence_sets.append(new_set)
            day.completed = False
            day.pause_millis = self._pause_millis

            pruned = day.build_all()
        except Exception:
            self.schedule.set_sentence_index(saved_index)
            raise

        # Commit: nothing above touched history or the current day
        if previous is not None and previous.completed:
            self.past_days.append(previous)
        self.current_day = day

        log.info(
            "day_prepared",
            course_id=self.id,
            day_id=str(day.id),
            day_number=len(self.past_days) + 1,
            new_sentences=day.num_new_sentences,
            sets=len(day.sentence_sets),
            pruned_sets=len(pruned),
            cursor=self.schedule.sentence_index,
        )
        if day.is_empty:
            log.info("course_content_exhausted", course_id=self.id)
        return day

    def books(self) -> list[str]:
        """Book names in course pack order."""
        return list(dict.fromkeys(pack.book for pack in self.packs))

    def _book_packs(self, book: str) -> list[Pack | None]:
        """One pack per course language for `book`; None where a language lacks it."""
        return [
            next((p for p in self.packs if p.book == book and language.owns(p)), None)
            for language in self.languages
        ]

    def _sentence_groups(self, start: int, n: int) -> list[SentenceGroup]:
        """Groups for the 0-based positions `[start, start + n)`.

        Books are concatenated in course pack order and every language reads
        the same position within the same book. A book spans its longest
        pack, so shorter packs leave None slots instead of pulling sentences
        from the next book.
        """
        language_ids = [language.id for language in self.languages]
        groups: list[SentenceGroup] = []
        offset = start
        for book in self.books():
            packs = self._book_packs(book)
            length = max((p.sentence_count() for p in packs if p is not None), default=0)
            if offset >= length:
                offset -= length
                continue
            while len(groups) < n and offset < length:
                sentences = [p.sentence_at(offset + 1) if p is not None else None for p in packs]
                groups.append(SentenceGroup(start + len(groups) + 1, list(language_ids), sentences))
                offset += 1
            if len(groups) >= n:
                break
            offset = 0

        incomplete = [g for g in groups if not g.is_complete]
        if incomplete:
            # Packs for the same book differ in length or have holes; keep what exists
            log.warning(
                "sentence_groups_incomplete",
                course_id=self.id,
                indices=[g.index for g in incomplete],
                missing=sorted({lang for g in incomplete for lang in g.missing_languages}),
            )
        return groups

    # --- progress ---

    def complete_current_day(self) -> Day:
        """Mark today as done and fold its played reviews into `num_reps`."""
        day = self.current_day
        if day is None:
            raise_result(state_conflict("course", "not started", "complete a day of", origin="course"))
        if day.completed:
            raise_result(state_conflict("day", "completed", "complete", origin="course"))
        self.add_reps(day.total_reviews - day.reviews_left)
        day.complete()
        log.info("day_completed", course_id=self.id, day_id=str(day.id), total_reps=self.total_reps)
        return day

    def add_reps(self, reps: int) -> None:
        self.num_reps += reps

    def set_starting_sentence_for_all_schedules(self, sentence: Sentence) -> None:
        """Resume or rewind: the next batch starts at `sentence`."""
        self.set_starting_sentence(sentence.index)

    def set_starting_sentence(self, index: int) -> None:
        if index < 1:
            raise_result(out_of_range("starting_sentence", index, min_val=1, origin="course"))
        # Sentence indices start at 1, the cursor at 0
        self.schedule.set_sentence_index(index - 1)
        log.info("cursor_overridden", course_id=self.id, sentence_index=index)

    @property
    def num_sentences_seen(self) -> int:
        seen = sum(day.num_new_sentences for day in self.past_days)
        if self.current_day is not None and self.current_day.completed:
            seen += self.current_day.num_new_sentences
        return seen

    @property
    def total_reps(self) -> int:
        total = self.num_reps
        day = self.current_day
        if day is not None and not day.completed:
            total += day.total_reviews - day.reviews_left
        return total

    @property
    def is_complete(self) -> bool:
        return self.current_day is not None and self.current_day.is_empty

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "languages": [language.id for language in self.languages],
            "packs": [
                {"language_id": p.language_id, "book": p.book, "sentence_count": p.sentence_count()}
                for p in self.packs
            ],
            "schedule": self.schedule.snapshot(),
            "pause_millis": self._pause_millis,
            "num_reps": self.num_reps,
            "total_reps": self.total_reps,
            "num_sentences_seen": self.num_sentences_seen,
            "is_complete": self.is_complete,
            "current_day": self.current_day.snapshot() if self.current_day else None,
            "past_days": [day.snapshot() for day in self.past_days],
        }


def course_title(languages: list[Language]) -> str:
    return " → ".join(language.display_name for language in languages)


def create_course(
    store: SentenceStore,
    language_ids: list[str],
    books: list[str],
    *,
    sentences_per_day: int,
    reviews: list[int],
    starting_sentence: int = 1,
    title: str | None = None,
    chorus: Chorus = Chorus.NONE,
    pause_millis: int = 0,
) -> Result[Course, AppError]:
    """Resolve languages and packs from the store and build a Course.

    The first language is the base language, the rest are targets. Every
    book must exist for every language.

    Args:
        store: Loaded sentence store
        language_ids: Course languages, base language first
        books: Book names, in the order their packs are studied
        sentences_per_day: New sentences introduced per day
        reviews: Review pattern, repetitions per study day of a set
        starting_sentence: 1-based index of the first new sentence
        title: Course title, defaults to the language names joined by " → "
        chorus: Whether target languages are played twice
        pause_millis: Pause between sentences during playback

    Returns:
        Ok(Course) ready for `prepare_next_day`
        Err(AppError) for an unknown language or pack, or a bad schedule
    """
    if starting_sentence < 1:
        return out_of_range("starting_sentence", starting_sentence, min_val=1, origin="create_course")

    languages: list[Language] = []
    for language_id in language_ids:
        language = store.get_language(language_id)
        if language is None:
            return not_found("Language", language_id, origin="create_course")
        languages.append(language)

    packs: list[Pack] = []
    for language in languages:
        for book in books:
            pack = store.get_pack(language.id, book)
            if pack is None:
                return not_found("Pack", f"{language.id}/{book}", origin="create_course")
            packs.append(pack)

    schedule = Schedule(
        num_sentences=sentences_per_day,
        reviews=list(reviews),
        sentence_index=starting_sentence - 1,
        order=build_order(len(languages), chorus),
    )
    course = Course(
        title=title or course_title(languages),
        languages=languages,
        packs=packs,
        schedule=schedule,
        pause_millis=pause_millis,
    )
    return course.validate().map(lambda _: course)
