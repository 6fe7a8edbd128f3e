"""Sentence Store

In-memory, read-only view of parallel sentence content, organised as
Language -> Pack (one per book) -> 1-indexed Sentences. The scheduler only
reads from it; content provisioning goes through `create_sentence_or_update`.
"""
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Sentence:
    """One sentence of a pack. Index is 1-based."""
    index: int
    text: str | None = None
    translation: str | None = None
    ipa: str | None = None
    romanization: str | None = None
    audio: str | None = None

    def snapshot(self) -> dict:
        return {
            "index": self.index,
            "text": self.text,
            "translation": self.translation,
            "ipa": self.ipa,
            "romanization": self.romanization,
            "audio": self.audio,
        }


@dataclass(slots=True, eq=False)
class Pack:
    """Ordered sentences of one book in one language."""
    language_id: str
    book: str
    id: UUID = field(default_factory=uuid4)
    _sentences: dict[int, Sentence] = field(default_factory=dict, repr=False)

    def sentence_count(self) -> int:
        """Length of the 1-based index space: the highest index present.

        Holes left by missing indices count, so paging reaches every
        sentence and a hole shows up as a missing entry.
        """
        return max(self._sentences, default=0)

    def missing_indices(self) -> list[int]:
        return [i for i in range(1, self.sentence_count() + 1) if i not in self._sentences]

    def sentence_at(self, index: int) -> Sentence | None:
        """Sentence with the given 1-based index, if present."""
        return self._sentences.get(index)

    def sentences(self) -> list[Sentence]:
        return [self._sentences[i] for i in sorted(self._sentences)]

    def create_sentence_or_update(
        self,
        index: int,
        text: str | None = None,
        translation: str | None = None,
        ipa: str | None = None,
        romanization: str | None = None,
        audio: str | None = None,
    ) -> Sentence:
        """Create the sentence at `index` or backfill its missing fields.

        Fields already set are kept; previously returned Sentence values are
        never mutated, the stored value is replaced instead.
        """
        if index < 1:
            raise ValueError(f"Sentence index must be >= 1, got {index}")

        existing = self._sentences.get(index)
        if existing is None:
            sentence = Sentence(index, text, translation, ipa, romanization, audio)
        else:
            sentence = replace(
                existing,
                text=existing.text or text,
                translation=existing.translation or translation,
                ipa=existing.ipa or ipa,
                romanization=existing.romanization or romanization,
                audio=existing.audio or audio,
            )
        self._sentences[index] = sentence
        return sentence


@dataclass(slots=True, eq=False)
class Language:
    """A language and its packs, keyed by book name."""
    id: str
    name: str | None = None
    packs: dict[str, Pack] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def get_pack(self, book: str) -> Pack | None:
        return self.packs.get(book)

    def get_or_create_pack(self, book: str) -> Pack:
        pack = self.packs.get(book)
        if pack is None:
            pack = Pack(language_id=self.id, book=book)
            self.packs[book] = pack
        return pack

    def owns(self, pack: Pack) -> bool:
        return self.packs.get(pack.book) is pack


class SentenceStore(Protocol):
    """Read interface the scheduler consumes."""

    def get_language(self, language_id: str) -> Language | None: ...

    def get_pack(self, language_id: str, book: str) -> Pack | None: ...


class InMemorySentenceStore:
    """Dict-backed sentence store."""

    __slots__ = ("_languages",)

    def __init__(self):
        self._languages: dict[str, Language] = {}

    def get_language(self, language_id: str) -> Language | None:
        return self._languages.get(language_id)

    def get_pack(self, language_id: str, book: str) -> Pack | None:
        language = self._languages.get(language_id)
        return language.get_pack(book) if language else None

    def languages(self) -> list[Language]:
        return list(self._languages.values())

    def add_language(self, language_id: str, name: str | None = None) -> Language:
        """Return the language with this id, creating it if needed."""
        language = self._languages.get(language_id)
        if language is None:
            language = Language(id=language_id, name=name)
            self._languages[language_id] = language
        elif name and not language.name:
            language.name = name
        return language

    def add_pack(self, language_id: str, book: str) -> Pack:
        return self.add_language(language_id).get_or_create_pack(book)

    def misaligned_books(self) -> list[str]:
        """Books whose packs differ in length across languages or have holes."""
        counts: dict[str, set[int]] = {}
        holed: set[str] = set()
        for language in self._languages.values():
            for book, pack in language.packs.items():
                counts.setdefault(book, set()).add(pack.sentence_count())
                if pack.missing_indices():
                    holed.add(book)
        return sorted(holed | {book for book, sizes in counts.items() if len(sizes) > 1})
