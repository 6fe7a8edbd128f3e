from engines.store import InMemorySentenceStore, Language, Pack, Sentence, SentenceStore
from engines.schedule import Chorus, Schedule, parse_review_pattern, parse_sentences_per_day, build_order
from engines.sets import SentenceGroup, SentenceSet
from engines.day import Day, prioritize_latest
from engines.course import Course, create_course

__all__ = [
    "InMemorySentenceStore",
    "Language",
    "Pack",
    "Sentence",
    "SentenceStore",
    "Chorus",
    "Schedule",
    "parse_review_pattern",
    "parse_sentences_per_day",
    "build_order",
    "SentenceGroup",
    "SentenceSet",
    "Day",
    "prioritize_latest",
    "Course",
    "create_course",
]
