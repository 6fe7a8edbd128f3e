"""Sentence Store Loading

Reads pack content from YAML files or the database and hands the scheduler
a fully loaded in-memory store, so no I/O happens while days are prepared.

YAML layout (one book per file, any number of languages):

    book: basics
    languages:
      - id: EN
        name: English
        sentences:
          - {index: 1, text: "Hello."}
      - id: ES
        name: Spanish
        sentences:
          - {index: 1, text: "Hola.", ipa: "ˈola"}
"""
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.errors import (
    AppError,
    DatabaseErrorMapper,
    Err,
    Ok,
    Result,
    invalid_format,
    required_field,
    sequence_results,
)
from core.logging import engine_logger
from engines.store import InMemorySentenceStore
from models.content import LanguageRecord, PackRecord, SentenceRecord

log = engine_logger()

_db_mapper = DatabaseErrorMapper("loader")

SENTENCE_FIELDS = ("text", "translation", "ipa", "romanization", "audio")


@dataclass(slots=True)
class PackContent:
    """Raw sentences of one book in one language."""
    language_id: str
    book: str
    language_name: str | None = None
    sentences: list[dict] = field(default_factory=list)


def parse_pack_document(data: dict) -> Result[list[PackContent], AppError]:
    """Turn one YAML document into per-language pack contents."""
    book = data.get("book")
    if not book:
        return required_field("book", origin="loader")

    contents = []
    for lang in data.get("languages") or []:
        language_id = lang.get("id")
        if not language_id:
            return required_field("languages[].id", origin="loader")
        sentences = []
        for raw in lang.get("sentences") or []:
            index = raw.get("index")
            if not isinstance(index, int) or index < 1:
                return invalid_format("index", "positive integer", str(index), origin="loader")
            sentences.append({"index": index, **{k: raw.get(k) for k in SENTENCE_FIELDS}})
        indices = sorted(s["index"] for s in sentences)
        if indices != list(range(1, len(indices) + 1)):
            return invalid_format(
                "index",
                "contiguous indices from 1",
                f"{language_id}: {indices}",
                origin="loader",
            )
        contents.append(PackContent(
            language_id=str(language_id),
            book=str(book),
            language_name=lang.get("name"),
            sentences=sentences,
        ))
    return Ok(contents)


def load_packs_from_yaml(path: Path) -> Result[list[PackContent], AppError]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    result = parse_pack_document(data)
    if result.is_err():
        return Err(result.unwrap_err().with_metadata(path=str(path)))
    return result


def load_packs_from_dir(directory: Path) -> Result[list[PackContent], AppError]:
    """All packs from the YAML files in `directory`, failing on the first bad file."""
    result = sequence_results([load_packs_from_yaml(p) for p in sorted(directory.glob("*.y*ml"))])
    if result.is_err():
        return result
    contents = [content for per_file in result.unwrap() for content in per_file]
    log.info("packs_read", directory=str(directory), packs=len(contents))
    return Ok(contents)


def populate_store(store: InMemorySentenceStore, contents: list[PackContent]) -> InMemorySentenceStore:
    """Add pack contents to the store, backfilling sentences that exist."""
    for content in contents:
        store.add_language(content.language_id, content.language_name)
        pack = store.add_pack(content.language_id, content.book)
        for raw in content.sentences:
            pack.create_sentence_or_update(raw["index"], *(raw.get(k) for k in SENTENCE_FIELDS))

    misaligned = store.misaligned_books()
    if misaligned:
        log.warning("packs_misaligned", books=misaligned)
    return store


async def save_pack(session: AsyncSession, content: PackContent) -> Result[int, AppError]:
    """Create or update one pack and its sentences. Returns the sentence count."""
    try:
        language = await session.get(LanguageRecord, content.language_id)
        if language is None:
            language = LanguageRecord(id=content.language_id, name=content.language_name)
            session.add(language)
        elif content.language_name and not language.name:
            language.name = content.language_name

        result = await session.execute(
            select(PackRecord)
            .options(selectinload(PackRecord.sentences))
            .where(PackRecord.language_id == content.language_id, PackRecord.book == content.book)
        )
        pack = result.scalar_one_or_none()
        if pack is None:
            pack = PackRecord(language_id=content.language_id, book=content.book, sentences=[])
            session.add(pack)

        existing = {s.index: s for s in pack.sentences}
        for raw in content.sentences:
            record = existing.get(raw["index"])
            if record is None:
                record = SentenceRecord(index=raw["index"])
                pack.sentences.append(record)
                existing[raw["index"]] = record
            record.text = record.text or raw.get("text")
            record.translation = record.translation or raw.get("translation")
            record.ipa = record.ipa or raw.get("ipa")
            record.romanization = record.romanization or raw.get("romanization")
            record.audio_path = record.audio_path or raw.get("audio")

        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        return Err(_db_mapper.map_exception(e))

    log.info("pack_saved", language=content.language_id, book=content.book, sentences=len(existing))
    return Ok(len(existing))


async def load_store_from_db(session: AsyncSession) -> Result[InMemorySentenceStore, AppError]:
    """Snapshot all languages, packs and sentences into memory."""
    try:
        result = await session.execute(
            select(LanguageRecord).options(
                selectinload(LanguageRecord.packs).selectinload(PackRecord.sentences)
            )
        )
        languages = result.scalars().all()
    except SQLAlchemyError as e:
        return Err(_db_mapper.map_exception(e))

    contents = [
        PackContent(
            language_id=language.id,
            book=pack.book,
            language_name=language.name,
            sentences=[
                {
                    "index": s.index,
                    "text": s.text,
                    "translation": s.translation,
                    "ipa": s.ipa,
                    "romanization": s.romanization,
                    "audio": s.audio_path,
                }
                for s in pack.sentences
            ],
        )
        for language in languages
        for pack in language.packs
    ]
    store = InMemorySentenceStore()
    for language in languages:
        store.add_language(language.id, language.name)
    populate_store(store, contents)
    log.info("store_loaded", languages=len(languages), packs=len(contents))
    return Ok(store)
