"""Schedule: review cadence, batch size and the shared new-sentence cursor.

Also holds the helpers that turn user input into schedule configuration
(review pattern text, sentences per day, chorus order strings).
"""
import re
from dataclasses import dataclass, field
from enum import Enum

from core.config import settings
from core.errors import AppError, Ok, Result, schedule_misconfigured

_PATTERN_DELIMITERS = re.compile(r"[*.,/ ]")
EMPTY_PATTERN_PLACEHOLDER = "? / ? / ?"


class Chorus(str, Enum):
    """Whether target-language sentences are played twice."""
    ALL = "all"
    NEW = "new"
    NONE = "none"


@dataclass(slots=True)
class Schedule:
    """Shared cursor over the concatenated sentence index space.

    `sentence_index` is 0-based: the next `next_batch` call starts at
    sentence `sentence_index + 1`.
    """
    num_sentences: int = 10
    reviews: list[int] = field(default_factory=list)
    sentence_index: int = 0
    order: str = "01"

    def next_batch(self, n: int) -> tuple[int, int]:
        """Claim the next `n` sentences.

        Content bounds are not checked here, the set builder stops at the
        end of the packs.

        Args:
            n: Number of sentences to claim

        Returns:
            `(start, n)` where `start` is the 0-based cursor before the claim
        """
        if n < 0:
            raise ValueError(f"Batch size must be non-negative, got {n}")
        start = self.sentence_index
        self.sentence_index = start + n
        return start, n

    def set_sentence_index(self, index: int) -> None:
        """Move the cursor directly, bypassing `next_batch`."""
        if index < 0:
            raise ValueError(f"Sentence index must be non-negative, got {index}")
        self.sentence_index = index

    def review_pattern(self) -> list[int]:
        return list(self.reviews)

    def order_strategy(self) -> str:
        return self.order

    def validate(self) -> Result[None, AppError]:
        if self.num_sentences <= 0:
            return schedule_misconfigured(
                "num_sentences",
                f"sentences per day must be positive, got {self.num_sentences}",
                origin="schedule",
            )
        if not self.order or not self.order.isdigit():
            return schedule_misconfigured(
                "order", f"order must be a string of language digits, got '{self.order}'", origin="schedule"
            )
        if any(r < 0 for r in self.reviews):
            return schedule_misconfigured("reviews", "review counts must be non-negative", origin="schedule")
        return Ok(None)

    def snapshot(self) -> dict:
        return {
            "num_sentences": self.num_sentences,
            "reviews": list(self.reviews),
            "sentence_index": self.sentence_index,
            "order": self.order,
        }


def parse_review_pattern(text: str, max_repetitions: int | None = None) -> list[int]:
    """Parse "4 / 3 / 2 / 1" style input into review counts.

    Accepts `*`, `.`, `,`, `/` and spaces as separators, drops anything that
    is not an integer and clamps entries to `max_repetitions`.
    """
    cap = settings.MAX_REPETITIONS if max_repetitions is None else max_repetitions
    numbers = []
    for part in _PATTERN_DELIMITERS.split(text.strip()):
        try:
            numbers.append(min(cap, int(part)))
        except ValueError:
            continue
    return numbers


def format_review_pattern(text: str) -> str:
    """Normalise review pattern input for display."""
    if not text:
        return EMPTY_PATTERN_PLACEHOLDER
    return " / ".join(str(n) for n in parse_review_pattern(text))


def parse_sentences_per_day(text: str, max_sentences: int | None = None) -> int:
    """Integer sentences per day clamped to the maximum; 0 when invalid."""
    cap = settings.MAX_SENTENCES_PER_DAY if max_sentences is None else max_sentences
    try:
        return min(cap, int(text))
    except ValueError:
        return 0


def build_order(num_languages: int, chorus: Chorus = Chorus.NONE) -> str:
    """Playback order: digit i plays the course's i-th language.

    With chorus ALL every target language is played twice ("011"); a
    single-language course plays its only language twice ("00").
    """
    # TODO: give Chorus.NEW its own order for first-day sets only
    parts = []
    for i in range(num_languages):
        if chorus == Chorus.ALL and (i > 0 or num_languages == 1):
            parts.append(f"{i}{i}")
        else:
            parts.append(str(i))
    return "".join(parts)
