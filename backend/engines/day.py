"""Day: one study session made of SentenceSets."""
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from engines.sets import SentenceSet


def prioritize_latest(sets: list[SentenceSet]) -> list[SentenceSet]:
    """Move the most recently appended set to the front.

    Pre: `sets` is in carry-forward order, last element introduced yesterday.
    Post: same elements, last moved to index 0, others keep relative order.
    Returns a new list; lists of length 0 or 1 come back unchanged.
    """
    if len(sets) < 2:
        return list(sets)
    return [sets[-1], *sets[:-1]]


@dataclass(slots=True)
class Day:
    sentence_sets: list[SentenceSet] = field(default_factory=list)
    completed: bool = False
    pause_millis: int = 0
    reviews_completed: int = 0
    id: UUID = field(default_factory=uuid4)

    @property
    def introduced_set(self) -> SentenceSet | None:
        """The set of new material introduced on this day, if it survived pruning."""
        for sentence_set in self.sentence_sets:
            if sentence_set.first_day:
                return sentence_set
        return None

    @property
    def num_new_sentences(self) -> int:
        introduced = self.introduced_set
        return len(introduced.groups) if introduced is not None else 0

    @property
    def total_reviews(self) -> int:
        return sum(len(s.sentences) for s in self.sentence_sets)

    @property
    def reviews_left(self) -> int:
        return max(0, self.total_reviews - self.reviews_completed)

    @property
    def is_empty(self) -> bool:
        """No sets left: the course has run out of material."""
        return not self.sentence_sets

    def record_review(self, count: int = 1) -> int:
        """Count reviews played; returns how many remain."""
        if count < 0:
            raise ValueError(f"Review count must be non-negative, got {count}")
        self.reviews_completed = min(self.total_reviews, self.reviews_completed + count)
        return self.reviews_left

    def complete(self) -> None:
        self.completed = True

    def build_all(self) -> list[SentenceSet]:
        """Materialise every set and drop the empty ones.

        All sets are built before any is removed so one empty set never
        stops the others from being built. Returns the pruned sets.
        """
        empty = [s for s in self.sentence_sets if not s.build_sentences()]
        if empty:
            self.sentence_sets = [s for s in self.sentence_sets if all(s is not e for e in empty)]
        return empty

    def snapshot(self) -> dict:
        return {
            "id": str(self.id),
            "completed": self.completed,
            "pause_millis": self.pause_millis,
            "total_reviews": self.total_reviews,
            "reviews_left": self.reviews_left,
            "sentence_sets": [s.snapshot() for s in self.sentence_sets],
        }
