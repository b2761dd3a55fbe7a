#!/usr/bin/env python3
"""
Domain keyword lookup.

Keywords come from configuration (KeywordConfig). Text and keywords are
normalized the same way (NFKC + casefold) and split into word tokens, so a
multi-word keyword such as "notice period" matches as a token sequence.
No regex is built from keyword content.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def normalize(text: str) -> str:
    return unicodedata.normalize("NFKC", text).casefold()


def tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall(normalize(text))


@dataclass(frozen=True)
class KeywordMatch:
    hits: int
    counts: Dict[str, int]
    token_count: int

    @property
    def distinct(self) -> int:
        return len(self.counts)

    @property
    def density(self) -> float:
        """Keyword hits per token, in [0, 1]."""
        if self.token_count == 0:
            return 0.0
        return min(1.0, self.hits / self.token_count)


class KeywordIndex:
    """Immutable keyword list with normalized frequency counting."""

    def __init__(self, keywords: Iterable[str]):
        phrases: Dict[Tuple[str, ...], str] = {}
        for keyword in keywords:
            tokens = tuple(tokenize(keyword))
            if tokens and tokens not in phrases:
                phrases[tokens] = " ".join(tokens)
        self._phrases = phrases
        self._by_first: Dict[str, List[Tuple[str, ...]]] = {}
        for tokens in phrases:
            self._by_first.setdefault(tokens[0], []).append(tokens)
        # Longest phrase first so "labor law" wins over a shorter overlap
        for candidates in self._by_first.values():
            candidates.sort(key=len, reverse=True)

    def __len__(self) -> int:
        return len(self._phrases)

    @property
    def keywords(self) -> List[str]:
        return sorted(self._phrases.values())

    def match(self, text: str) -> KeywordMatch:
        tokens = tokenize(text)
        counts: Dict[str, int] = {}
        hits = 0
        i = 0
        while i < len(tokens):
            matched = None
            for phrase in self._by_first.get(tokens[i], ()):
                if tuple(tokens[i:i + len(phrase)]) == phrase:
                    matched = phrase
                    break
            if matched is None:
                i += 1
                continue
            name = self._phrases[matched]
            counts[name] = counts.get(name, 0) + 1
            hits += 1
            i += len(matched)
        return KeywordMatch(hits=hits, counts=counts, token_count=len(tokens))
