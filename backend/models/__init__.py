from models.content import LanguageRecord, PackRecord, SentenceRecord

__all__ = [
    "LanguageRecord", "PackRecord", "SentenceRecord",
]
