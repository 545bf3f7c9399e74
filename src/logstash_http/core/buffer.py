"""
Thread-safe accumulation of rendered documents between flushes.
"""

from __future__ import annotations

import threading

from .serialization import Document


class BatchBuffer:
    """Open batch of rendered documents.

    ``add`` may be called from any thread (e.g. a stdlib logging handler)
    while the event loop takes the batch. The swap in ``take_and_reset`` is
    atomic with respect to ``add``: a document lands either in the taken
    batch or in the fresh one, never both and never neither.
    """

    __slots__ = ("_documents", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._documents: list[Document] = []

    def add(self, document: Document) -> int:
        """Append a document; returns the size of the open batch."""
        with self._lock:
            self._documents.append(document)
            return len(self._documents)

    def take_and_reset(self) -> list[Document]:
        with self._lock:
            taken = self._documents
            self._documents = []
        return taken

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def is_empty(self) -> bool:
        return len(self) == 0
