"""
Normalization layer exports.
"""

from app.scraping.normalization.record_normalizer import RATING_WORDS, RecordNormalizer

__all__ = ["RATING_WORDS", "RecordNormalizer"]
