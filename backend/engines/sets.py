"""Sentence groups and sets.

A SentenceGroup aligns one sentence index across the course languages.
A SentenceSet is a cohort of groups introduced on the same day; it is
materialised into a playback list by `build_sentences`.
"""
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from engines.store import Sentence


@dataclass(slots=True)
class SentenceGroup:
    """One sentence index across all course languages.

    `sentences[i]` belongs to `languages[i]`; a slot is None when that
    language's packs ran out before this index (misaligned packs).
    """
    index: int
    languages: list[str]
    sentences: list[Sentence | None]

    @property
    def is_complete(self) -> bool:
        return all(s is not None for s in self.sentences)

    @property
    def missing_languages(self) -> list[str]:
        return [lang for lang, s in zip(self.languages, self.sentences) if s is None]

    def sentence_for(self, position: int) -> Sentence | None:
        if 0 <= position < len(self.sentences):
            return self.sentences[position]
        return None

    def copy(self) -> "SentenceGroup":
        # Sentences are immutable values and may be shared
        return SentenceGroup(self.index, list(self.languages), list(self.sentences))

    def snapshot(self) -> dict:
        return {
            "index": self.index,
            "languages": list(self.languages),
            "sentences": [s.snapshot() if s else None for s in self.sentences],
            "complete": self.is_complete,
        }


@dataclass(slots=True)
class PlaybackItem:
    """One entry of a materialised set: a sentence in a given language."""
    language: str
    sentence: Sentence


@dataclass(slots=True)
class SentenceSet:
    """Groups introduced together, with their own review pattern.

    `reviews[k]` is the number of repetitions on the k-th day the set is
    studied (k = `days_studied`). Once the pattern is used up the set has
    nothing to play and is pruned. With an empty pattern the set is
    reviewed once a day indefinitely.
    """
    groups: list[SentenceGroup] = field(default_factory=list)
    reviews: list[int] = field(default_factory=list)
    order: str = "01"
    first_day: bool = False
    days_studied: int = 0
    id: UUID = field(default_factory=uuid4)
    sentences: list[PlaybackItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def repetitions(self) -> int:
        if not self.reviews:
            return 1
        if self.days_studied < len(self.reviews):
            return self.reviews[self.days_studied]
        return 0

    def build_sentences(self) -> bool:
        """Materialise the playback list from the groups.

        Rebuilding replaces the previous list. Returns False when the set
        has nothing to play and should be pruned.
        """
        items: list[PlaybackItem] = []
        if self.groups:
            for _ in range(self.repetitions):
                for group in self.groups:
                    for char in self.order:
                        position = int(char)
                        sentence = group.sentence_for(position)
                        if sentence is not None:
                            items.append(PlaybackItem(group.languages[position], sentence))
        self.sentences = items
        return bool(items)

    def carried_forward(self) -> "SentenceSet":
        """Structural copy for the next day's review."""
        return SentenceSet(
            groups=[g.copy() for g in self.groups],
            reviews=list(self.reviews),
            order=self.order,
            first_day=False,
            days_studied=self.days_studied + 1,
            id=self.id,
        )

    def snapshot(self) -> dict:
        return {
            "id": str(self.id),
            "first_day": self.first_day,
            "order": self.order,
            "reviews": list(self.reviews),
            "days_studied": self.days_studied,
            "repetitions": self.repetitions,
            "groups": [g.snapshot() for g in self.groups],
            "num_sentences": len(self.sentences),
        }
