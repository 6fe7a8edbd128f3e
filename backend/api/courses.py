"""Courses API

Creates courses over the loaded sentence store and drives them day by day.
Every mutating route holds the course's lock, so at most one advancement,
rep update or cursor override runs per course at a time.
"""
import asyncio

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.content import SentenceResponse, get_store
from core.config import settings
from core.errors import AppError, Ok, Result, not_found, raise_result, state_conflict
from core.logging import api_logger, bind_context
from engines.course import Course, create_course
from engines.schedule import Chorus, parse_review_pattern
from engines.store import InMemorySentenceStore

log = api_logger()

router = APIRouter()


class CourseRegistry:
    """In-process courses with one asyncio.Lock each."""

    __slots__ = ("_courses", "_locks")

    def __init__(self):
        self._courses: dict[str, Course] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def add(self, course: Course) -> Course:
        self._courses[course.id] = course
        self._locks[course.id] = asyncio.Lock()
        return course

    def get(self, course_id: str) -> Result[Course, AppError]:
        course = self._courses.get(course_id)
        if course is None:
            return not_found("Course", course_id, origin="course_registry")
        return Ok(course)

    def lock(self, course_id: str) -> asyncio.Lock:
        return self._locks.setdefault(course_id, asyncio.Lock())

    def all(self) -> list[Course]:
        return list(self._courses.values())


_registry = CourseRegistry()


def get_registry() -> CourseRegistry:
    return _registry


# === Models ===

class CourseCreate(BaseModel):
    language_ids: list[str] = Field(min_length=1)
    books: list[str] = Field(min_length=1)
    sentences_per_day: int = Field(default_factory=lambda: settings.DEFAULT_SENTENCES_PER_DAY)
    review_pattern: str = Field(default_factory=lambda: settings.DEFAULT_REVIEW_PATTERN)
    starting_sentence: int = 1
    title: str | None = None
    chorus: Chorus = Chorus.NONE
    pause_millis: int = Field(default_factory=lambda: settings.DEFAULT_PAUSE_MILLIS, ge=0)


class RepsUpdate(BaseModel):
    reps: int = Field(ge=0)


class ReviewUpdate(BaseModel):
    count: int = Field(default=1, ge=0)


class StartingSentenceUpdate(BaseModel):
    index: int = Field(ge=1)


class PauseUpdate(BaseModel):
    pause_millis: int = Field(ge=0)


class SentenceGroupResponse(BaseModel):
    index: int
    languages: list[str]
    sentences: list[SentenceResponse | None]
    complete: bool


class SentenceSetResponse(BaseModel):
    id: str
    first_day: bool
    order: str
    reviews: list[int]
    days_studied: int
    repetitions: int
    groups: list[SentenceGroupResponse]
    num_sentences: int


class DayResponse(BaseModel):
    id: str
    completed: bool
    pause_millis: int
    total_reviews: int
    reviews_left: int
    sentence_sets: list[SentenceSetResponse]


class ScheduleResponse(BaseModel):
    num_sentences: int
    reviews: list[int]
    sentence_index: int
    order: str


class CoursePackResponse(BaseModel):
    language_id: str
    book: str
    sentence_count: int


class CourseResponse(BaseModel):
    id: str
    title: str
    languages: list[str]
    packs: list[CoursePackResponse]
    schedule: ScheduleResponse
    pause_millis: int
    num_reps: int
    total_reps: int
    num_sentences_seen: int
    is_complete: bool
    current_day: DayResponse | None
    past_days: list[DayResponse]


class CourseSummary(BaseModel):
    id: str
    title: str
    num_sentences_seen: int
    total_reps: int
    is_complete: bool


# === Endpoints ===

@router.post("", response_model=CourseResponse, status_code=201)
async def create(
    body: CourseCreate,
    store: InMemorySentenceStore = Depends(get_store),
    registry: CourseRegistry = Depends(get_registry),
):
    """Create a course over existing packs."""
    result = create_course(
        store,
        body.language_ids,
        body.books,
        sentences_per_day=body.sentences_per_day,
        reviews=parse_review_pattern(body.review_pattern),
        starting_sentence=body.starting_sentence,
        title=body.title,
        chorus=body.chorus,
        pause_millis=body.pause_millis,
    )
    raise_result(result)
    course = registry.add(result.unwrap())
    log.info("course_created", course_id=course.id, title=course.title, languages=body.language_ids)
    return course.snapshot()


@router.get("", response_model=list[CourseSummary])
async def list_courses(registry: CourseRegistry = Depends(get_registry)):
    return [
        CourseSummary(
            id=c.id,
            title=c.title,
            num_sentences_seen=c.num_sentences_seen,
            total_reps=c.total_reps,
            is_complete=c.is_complete,
        )
        for c in registry.all()
    ]


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(course_id: str, registry: CourseRegistry = Depends(get_registry)):
    result = registry.get(course_id)
    raise_result(result)
    return result.unwrap().snapshot()


@router.post("/{course_id}/next-day", response_model=DayResponse)
async def next_day(course_id: str, registry: CourseRegistry = Depends(get_registry)):
    """Prepare the next study day. An empty day means the course is finished."""
    result = registry.get(course_id)
    raise_result(result)
    course = result.unwrap()
    bind_context(course_id=course_id)
    async with registry.lock(course_id):
        day = course.prepare_next_day()
        return day.snapshot()


@router.post("/{course_id}/reviews", response_model=DayResponse)
async def record_reviews(
    course_id: str,
    body: ReviewUpdate,
    registry: CourseRegistry = Depends(get_registry),
):
    result = registry.get(course_id)
    raise_result(result)
    course = result.unwrap()
    async with registry.lock(course_id):
        if course.current_day is None:
            raise_result(state_conflict("course", "not started", "record reviews for", origin="courses_api"))
        course.current_day.record_review(body.count)
        return course.current_day.snapshot()


@router.post("/{course_id}/complete-day", response_model=CourseResponse)
async def complete_day(course_id: str, registry: CourseRegistry = Depends(get_registry)):
    result = registry.get(course_id)
    raise_result(result)
    course = result.unwrap()
    async with registry.lock(course_id):
        course.complete_current_day()
        return course.snapshot()


@router.post("/{course_id}/reps", response_model=CourseResponse)
async def add_reps(
    course_id: str,
    body: RepsUpdate,
    registry: CourseRegistry = Depends(get_registry),
):
    result = registry.get(course_id)
    raise_result(result)
    course = result.unwrap()
    async with registry.lock(course_id):
        course.add_reps(body.reps)
        return course.snapshot()


@router.put("/{course_id}/starting-sentence", response_model=CourseResponse)
async def set_starting_sentence(
    course_id: str,
    body: StartingSentenceUpdate,
    registry: CourseRegistry = Depends(get_registry),
):
    """Resume or rewind: the next day starts at sentence `index` (1-based)."""
    result = registry.get(course_id)
    raise_result(result)
    course = result.unwrap()
    async with registry.lock(course_id):
        course.set_starting_sentence(body.index)
        return course.snapshot()


@router.put("/{course_id}/pause", response_model=CourseResponse)
async def set_pause(
    course_id: str,
    body: PauseUpdate,
    registry: CourseRegistry = Depends(get_registry),
):
    result = registry.get(course_id)
    raise_result(result)
    course = result.unwrap()
    async with registry.lock(course_id):
        course.pause_millis = body.pause_millis
        return course.snapshot()
