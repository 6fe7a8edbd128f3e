import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers the content tables
from core.database import Base
from core.errors import ErrorCode
from engines.loader import (
    PackContent,
    load_packs_from_dir,
    load_packs_from_yaml,
    load_store_from_db,
    parse_pack_document,
    populate_store,
    save_pack,
)
from engines.store import InMemorySentenceStore

from conftest import CONTENT_DIR


def test_bundled_content_loads_into_aligned_store() -> None:
    contents = load_packs_from_dir(CONTENT_DIR).unwrap()
    store = populate_store(InMemorySentenceStore(), contents)

    assert {(c.language_id, c.book) for c in contents} >= {("EN", "basics"), ("ES", "basics")}
    assert store.get_language("ES").display_name == "Spanish"
    assert store.get_pack("EN", "basics").sentence_count() == 10
    assert store.get_pack("ES", "basics").sentence_at(1).ipa == "ˈbwenos ˈdias"
    assert store.misaligned_books() == []


def test_parse_pack_document_requires_book() -> None:
    result = parse_pack_document({"languages": []})
    assert result.unwrap_err().code == ErrorCode.E2001_REQUIRED_FIELD_MISSING


@pytest.mark.parametrize("index", [0, "1", None])
def test_parse_pack_document_rejects_bad_indices(index) -> None:
    data = {"book": "basics", "languages": [{"id": "EN", "sentences": [{"index": index, "text": "x"}]}]}
    result = parse_pack_document(data)
    assert result.unwrap_err().code == ErrorCode.E2002_INVALID_FORMAT


def test_parse_pack_document_rejects_holes_in_the_index() -> None:
    sentences = [{"index": i, "text": f"EN {i}"} for i in (1, 2, 5)]
    data = {"book": "basics", "languages": [{"id": "EN", "sentences": sentences}]}

    error = parse_pack_document(data).unwrap_err()

    assert error.code == ErrorCode.E2002_INVALID_FORMAT
    assert "EN" in error.message


def test_yaml_errors_carry_the_file_path(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("languages:\n  - id: EN\n", encoding="utf-8")

    error = load_packs_from_yaml(path).unwrap_err()
    assert error.metadata["path"] == str(path)


def test_populate_store_backfills_across_documents() -> None:
    store = InMemorySentenceStore()
    populate_store(store, [PackContent("ES", "basics", "Spanish", [{"index": 1, "text": "Hola."}])])
    populate_store(store, [PackContent("ES", "basics", None, [{"index": 1, "text": "Otro.", "ipa": "ˈola"}])])

    sentence = store.get_pack("ES", "basics").sentence_at(1)
    assert sentence.text == "Hola."
    assert sentence.ipa == "ˈola"


def _session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    return engine, async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def test_packs_round_trip_through_the_database() -> None:
    async def scenario():
        engine, sessions = _session_factory()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        contents = load_packs_from_dir(CONTENT_DIR).unwrap()
        async with sessions() as session:
            for content in contents:
                assert (await save_pack(session, content)).is_ok()

        backfill = PackContent("EN", "basics", None, [
            {"index": 1, "text": "Ignored.", "audio": "EN/basics/1.mp3"},
            {"index": 11, "text": "Good night."},
        ])
        async with sessions() as session:
            assert (await save_pack(session, backfill)).unwrap() == 11

        async with sessions() as session:
            store = (await load_store_from_db(session)).unwrap()
        await engine.dispose()
        return store

    store = asyncio.run(scenario())

    en = store.get_pack("EN", "basics")
    assert en.sentence_at(1).text == "Good morning."
    assert en.sentence_at(1).audio == "EN/basics/1.mp3"
    assert en.sentence_at(11).text == "Good night."
    assert store.get_language("EN").display_name == "English"
    assert store.misaligned_books() == ["basics"]
