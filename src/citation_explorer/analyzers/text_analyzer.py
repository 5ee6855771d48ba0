"""
Text Analysis
=============

Naive keyword extraction for the paper detail view: lower-cased word
frequencies with stop words and short words removed.
"""

import re
from collections import Counter
from typing import List, Tuple

from citation_explorer.models import PaperRecord

STOP_WORDS = {
    "the", "is", "at", "which", "on", "and", "that", "this", "with", "from",
    "these", "those", "their", "there", "have", "been", "were", "into", "such",
    "also", "than", "then", "they", "them", "what", "when", "where", "while",
    "about", "over", "under", "between", "through", "both", "each", "more",
    "most", "other", "some", "only", "very", "can", "will", "would", "could",
    "should", "using", "used", "based", "paper", "show", "propose",
}

MIN_WORD_LENGTH = 4

WORD_PATTERN = re.compile(r"\b\w+\b")


def extract_keywords(text: str, top_n: int = 10) -> List[Tuple[str, int]]:
    """Return the most frequent words of ``text`` as (word, count) pairs.

    Ties keep the order in which words first appear.
    """
    words = WORD_PATTERN.findall(text.lower())
    frequency = Counter(
        word for word in words
        if word not in STOP_WORDS and len(word) >= MIN_WORD_LENGTH
    )
    # Counter.most_common is stable for equal counts (insertion order)
    return frequency.most_common(top_n)


def paper_keywords(paper: PaperRecord, top_n: int = 10) -> List[Tuple[str, int]]:
    """Keywords from a paper's abstract, or its title when there is no abstract."""
    return extract_keywords(paper.abstract or paper.title, top_n=top_n)
