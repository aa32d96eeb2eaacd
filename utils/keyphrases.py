"""Keyphrase extraction for free-form listing text.

RAKE scores candidate phrases split on stop words; the highest ranked phrases
come first. Stop words come from scikit-learn so no NLTK corpus download is
needed at runtime.
"""

import re
from typing import List

from nltk.tokenize import RegexpTokenizer
from rake_nltk import Rake
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

# Keeps dotted, dashed and slashed runs together ("2022-07-03", "05/07/2022").
WORD_TOKENIZER = RegexpTokenizer(r"\w+(?:[-/.:]\w+)*")

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?;])\s+|\n+")


def tokenize_words(text: str) -> List[str]:
    return WORD_TOKENIZER.tokenize(text)


def _split_sentences(text: str) -> List[str]:
    return [part for part in _SENTENCE_BOUNDARY.split(text) if part.strip()]


class KeyphraseExtractor:
    """Ranks phrases of a text by RAKE degree-to-frequency score."""

    def __init__(self, stopwords=ENGLISH_STOP_WORDS):
        self.stopwords = set(stopwords)

    def _rake(self) -> Rake:
        return Rake(
            stopwords=self.stopwords,
            sentence_tokenizer=_split_sentences,
            word_tokenizer=tokenize_words,
        )

    def extract(self, text: str) -> List[str]:
        if not text or not text.strip():
            return []
        rake = self._rake()
        rake.extract_keywords_from_text(text)
        return rake.get_ranked_phrases()
