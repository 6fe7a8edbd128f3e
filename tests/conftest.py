from __future__ import annotations

from pathlib import Path

import pytest

from engines.course import Course
from engines.schedule import Schedule
from engines.store import InMemorySentenceStore, Pack

ROOT = Path(__file__).resolve().parents[1]
CONTENT_DIR = ROOT / "data" / "content"


def fill_pack(store: InMemorySentenceStore, language_id: str, book: str, count: int) -> Pack:
    """Add a pack whose sentence texts read e.g. 'EN basics 3'."""
    pack = store.add_pack(language_id, book)
    for index in range(1, count + 1):
        pack.create_sentence_or_update(index, text=f"{language_id} {book} {index}")
    return pack


def make_course(
    store: InMemorySentenceStore,
    language_ids: list[str],
    books: list[str],
    *,
    num_sentences: int = 3,
    reviews: list[int] | None = None,
    order: str = "01",
) -> Course:
    languages = [store.get_language(lang) for lang in language_ids]
    packs = [store.get_pack(lang, book) for lang in language_ids for book in books]
    schedule = Schedule(num_sentences=num_sentences, reviews=reviews or [], order=order)
    return Course("test", languages, packs, schedule)


@pytest.fixture
def store() -> InMemorySentenceStore:
    """EN and ES, one 10-sentence 'basics' pack each."""
    store = InMemorySentenceStore()
    store.add_language("EN", "English")
    store.add_language("ES", "Spanish")
    fill_pack(store, "EN", "basics", 10)
    fill_pack(store, "ES", "basics", 10)
    return store


@pytest.fixture
def course(store: InMemorySentenceStore) -> Course:
    return make_course(store, ["EN", "ES"], ["basics"])
