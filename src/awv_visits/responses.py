"""ResponseStore — the explicit, passed-down store of a visit's answers.

The store maps question id → answer, where the answer shape depends on the
question type: a scalar (str / number / bool), a list of option ids, or a
structured dict for composite instruments.  It is created empty when a visit
begins, mutated on every recorded answer, and persisted wholesale whenever
progress is saved or the visit is completed.

The store is a read-only ``Mapping`` for the evaluator and resolver; only the
explicit mutators below change it.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from typing import Any


class ResponseStore(Mapping[str, Any]):
    """In-memory answers for one visit."""

    def __init__(self, answers: Mapping[str, Any] | None = None) -> None:
        self._answers: dict[str, Any] = copy.deepcopy(dict(answers or {}))

    # --- Mapping protocol ---

    def __getitem__(self, qid: str) -> Any:
        return self._answers[qid]

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"<ResponseStore answered={len(self.answered_ids())}>"

    # --- Mutators ---

    def set(self, qid: str, value: Any) -> None:
        """Record (or overwrite) the answer for ``qid``."""
        self._answers[qid] = copy.deepcopy(value)

    def update(self, answers: Mapping[str, Any]) -> None:
        """Record several answers at once."""
        for qid, value in answers.items():
            self.set(qid, value)

    def clear(self, qid: str) -> None:
        """Forget the answer for ``qid`` (no-op if absent)."""
        self._answers.pop(qid, None)

    # --- Queries ---

    def is_answered(self, qid: str) -> bool:
        return self._answers.get(qid) is not None

    def answered_ids(self) -> list[str]:
        return [qid for qid, value in self._answers.items() if value is not None]

    # --- Persistence ---

    def to_payload(self) -> dict[str, Any]:
        """Deep copy suitable for the visit-save payload."""
        return copy.deepcopy(self._answers)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "ResponseStore":
        """Rebuild a store from a visit-fetch ``responses`` map (None → empty)."""
        return cls(payload or {})
