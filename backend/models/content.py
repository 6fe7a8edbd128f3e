from datetime import datetime
from uuid import uuid4
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from core.database import Base, GUID


class LanguageRecord(Base):
    """A study language, identified by its short code (e.g. EN, ES)"""
    __tablename__ = "languages"

    id = Column(String(10), primary_key=True)
    name = Column(String(100))
    created_at = Column(DateTime, default=datetime.utcnow)

    packs = relationship("PackRecord", back_populates="language", cascade="all, delete-orphan")


class PackRecord(Base):
    """One book of sentences in one language"""
    __tablename__ = "packs"
    __table_args__ = (UniqueConstraint("language_id", "book", name="uq_pack_language_book"),)

    id = Column(GUID, primary_key=True, default=uuid4)
    language_id = Column(String(10), ForeignKey("languages.id", ondelete="CASCADE"), nullable=False)
    book = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    language = relationship("LanguageRecord", back_populates="packs")
    sentences = relationship(
        "SentenceRecord",
        back_populates="pack",
        cascade="all, delete-orphan",
        order_by="SentenceRecord.index",
    )


class SentenceRecord(Base):
    """A sentence at a 1-based index within a pack"""
    __tablename__ = "sentences"
    __table_args__ = (UniqueConstraint("pack_id", "index", name="uq_sentence_pack_index"),)

    id = Column(GUID, primary_key=True, default=uuid4)
    pack_id = Column(GUID, ForeignKey("packs.id", ondelete="CASCADE"), nullable=False)
    index = Column(Integer, nullable=False)
    text = Column(Text)
    translation = Column(Text)
    ipa = Column(Text)
    romanization = Column(Text)
    audio_path = Column(String(500))
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pack = relationship("PackRecord", back_populates="sentences")
