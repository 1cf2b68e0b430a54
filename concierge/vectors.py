"""
concierge/vectors.py

Hashed bag-of-words embeddings and nearest-neighbour intent matching.
- vectorize: lower-case, whitespace-split, CRC-32 each token into one of `dim` buckets, L2-normalize
- IntentIndex: immutable corpus snapshot + cosine similarity classifier with hot training

The representation is lossy on purpose: two utterances whose tokens land in the same
buckets get the same vector. CRC-32 is used instead of hash() so vectors stay identical
across interpreter restarts (hash() is salted per process).
"""

from __future__ import annotations

import logging
import threading
import zlib
from dataclasses import dataclass, field
from typing import Any, Iterable

import numpy as np

from concierge.intents import IntentMatch

logger = logging.getLogger(__name__)

DEFAULT_DIM = 100


def token_bucket(token: str, dim: int = DEFAULT_DIM) -> int:
    """Map a token to a stable bucket in [0, dim)."""
    return zlib.crc32(token.encode("utf-8")) % dim


def vectorize(text: str, dim: int = DEFAULT_DIM) -> np.ndarray:
    """Turn an utterance into a unit-length count vector (zero vector for empty text)."""
    vec = np.zeros(dim, dtype=np.float64)
    for token in (text or "").lower().split():
        vec[token_bucket(token, dim)] += 1.0
    norm = np.linalg.norm(vec)
    if norm == 0:
        return vec
    return vec / norm


@dataclass(frozen=True)
class CorpusEntry:
    text: str
    vector: np.ndarray = field(repr=False, compare=False)
    intent: str
    weight: float = 1.0
    entities: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class _Snapshot:
    entries: tuple[CorpusEntry, ...]
    matrix: np.ndarray  # one row per entry, rows are unit vectors (or zero)


def _stack(entries: tuple[CorpusEntry, ...], dim: int) -> np.ndarray:
    if not entries:
        return np.zeros((0, dim), dtype=np.float64)
    return np.vstack([e.vector for e in entries])


class IntentIndex:
    """Nearest-neighbour classifier over a labelled corpus.

    Reads work on whatever snapshot is current when they start. `add_example`
    builds a new snapshot and swaps it in with a single assignment, so a reader
    never sees an entry without its matrix row.
    """

    def __init__(self, dim: int = DEFAULT_DIM, threshold: float = 0.3):
        self.dim = dim
        self.threshold = threshold
        self._write_lock = threading.Lock()
        self._snapshot = _Snapshot(entries=(), matrix=_stack((), dim))

    @classmethod
    def from_corpus(cls, corpus: Iterable[tuple[str, str, float]], dim: int = DEFAULT_DIM,
                    threshold: float = 0.3) -> "IntentIndex":
        """Vectorize (text, intent, weight) rows once and return a ready index."""
        index = cls(dim=dim, threshold=threshold)
        entries = tuple(
            CorpusEntry(text=text, vector=vectorize(text, dim), intent=intent, weight=weight)
            for text, intent, weight in corpus
        )
        index._snapshot = _Snapshot(entries=entries, matrix=_stack(entries, dim))
        logger.debug("intent index built with %d entries (dim=%d)", len(entries), dim)
        return index

    @property
    def entries(self) -> tuple[CorpusEntry, ...]:
        return self._snapshot.entries

    def __len__(self) -> int:
        return len(self._snapshot.entries)

    def add_example(self, text: str, intent: str, entities: dict[str, Any] | None = None,
                    weight: float = 1.0) -> CorpusEntry:
        """Append a labelled example without touching existing vectors."""
        entry = CorpusEntry(text=text, vector=vectorize(text, self.dim), intent=intent,
                            weight=weight, entities=dict(entities or {}))
        with self._write_lock:
            current = self._snapshot
            entries = current.entries + (entry,)
            matrix = np.vstack([current.matrix, entry.vector[np.newaxis, :]])
            self._snapshot = _Snapshot(entries=entries, matrix=matrix)
        logger.info("added training example for intent=%s (%d entries)", intent, len(entries))
        return entry

    def _similarities(self, snapshot: _Snapshot, text: str) -> np.ndarray:
        vec = vectorize(text, self.dim)
        if not snapshot.entries or not vec.any():
            return np.zeros(len(snapshot.entries), dtype=np.float64)
        # rows and vec are unit length or zero, so the dot product is the cosine;
        # rounding can push an exact match just past 1
        return np.clip(snapshot.matrix @ vec, -1.0, 1.0)

    def classify(self, text: str, threshold: float | None = None) -> IntentMatch | None:
        """Return the best intent, or None when the best similarity is <= threshold."""
        limit = self.threshold if threshold is None else threshold
        snapshot = self._snapshot
        sims = self._similarities(snapshot, text)
        if sims.size == 0:
            return None
        best = int(np.argmax(sims))  # first maximum wins ties
        similarity = float(sims[best])
        if similarity <= limit:
            logger.debug("no vector match for %r (best=%.3f)", text, similarity)
            return None
        entry = snapshot.entries[best]
        confidence = min(max(similarity * entry.weight, 0.0), 1.0)
        logger.debug("vector match %s (sim=%.3f, conf=%.3f) via %r", entry.intent, similarity,
                     confidence, entry.text)
        return IntentMatch(intent=entry.intent, confidence=confidence, source="vector",
                           matched_text=entry.text)

    def similar(self, text: str, limit: int = 5) -> list[tuple[CorpusEntry, float]]:
        """Nearest corpus entries with their cosine similarity, best first."""
        snapshot = self._snapshot
        sims = self._similarities(snapshot, text)
        order = np.argsort(-sims, kind="stable")[:limit]
        return [(snapshot.entries[i], float(sims[i])) for i in order]
