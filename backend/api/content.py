"""Content API Routes

Lists the languages and packs available for courses and provisions new
pack content. The scheduler reads from the in-memory store; provisioning
writes to the database first and then refreshes the store.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import not_found, raise_result
from core.logging import api_logger
from engines.loader import PackContent, populate_store, save_pack
from engines.store import InMemorySentenceStore

log = api_logger()

router = APIRouter()

_store = InMemorySentenceStore()


def get_store() -> InMemorySentenceStore:
    return _store


def set_store(store: InMemorySentenceStore) -> None:
    global _store
    _store = store


# === Models ===

class SentenceIn(BaseModel):
    index: int = Field(ge=1)
    text: str | None = None
    translation: str | None = None
    ipa: str | None = None
    romanization: str | None = None
    audio: str | None = None


class PackCreate(BaseModel):
    language_id: str = Field(min_length=1, max_length=10)
    language_name: str | None = None
    book: str = Field(min_length=1)
    sentences: list[SentenceIn] = []


class PackSummary(BaseModel):
    language_id: str
    book: str
    sentence_count: int


class LanguageResponse(BaseModel):
    id: str
    name: str
    packs: list[PackSummary]


class SentenceResponse(BaseModel):
    index: int
    text: str | None
    translation: str | None
    ipa: str | None
    romanization: str | None
    audio: str | None


# === Endpoints ===

@router.get("/languages", response_model=list[LanguageResponse])
async def list_languages(store: InMemorySentenceStore = Depends(get_store)):
    """Languages with their packs and sentence counts."""
    return [
        LanguageResponse(
            id=language.id,
            name=language.display_name,
            packs=[
                PackSummary(language_id=language.id, book=pack.book, sentence_count=pack.sentence_count())
                for pack in language.packs.values()
            ],
        )
        for language in store.languages()
    ]


@router.get("/languages/{language_id}/packs/{book}/sentences/{index}", response_model=SentenceResponse)
async def get_sentence(
    language_id: str,
    book: str,
    index: int,
    store: InMemorySentenceStore = Depends(get_store),
):
    pack = store.get_pack(language_id, book)
    if pack is None:
        raise_result(not_found("Pack", f"{language_id}/{book}", origin="content_api"))
    sentence = pack.sentence_at(index)
    if sentence is None:
        raise_result(not_found("Sentence", f"{language_id}/{book}/{index}", origin="content_api"))
    return sentence.snapshot()


@router.post("/packs", response_model=PackSummary)
async def provision_pack(
    body: PackCreate,
    db: AsyncSession = Depends(get_db),
    store: InMemorySentenceStore = Depends(get_store),
):
    """Create or backfill a pack, then make it available to new courses."""
    content = PackContent(
        language_id=body.language_id,
        book=body.book,
        language_name=body.language_name,
        sentences=[s.model_dump() for s in body.sentences],
    )
    result = await save_pack(db, content)
    raise_result(result)

    populate_store(store, [content])
    pack = store.get_pack(body.language_id, body.book)
    log.info("pack_provisioned", language=body.language_id, book=body.book, sentences=pack.sentence_count())
    return PackSummary(language_id=body.language_id, book=body.book, sentence_count=pack.sentence_count())
