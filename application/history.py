"""Undo / redo history of formula values.

Formulas are immutable, so history is simply a list of snapshots.
"""

from typing import Generic, List, TypeVar

T = TypeVar("T")


class UndoStack(Generic[T]):
    """Linear undo history; a new edit discards the redo branch."""

    def __init__(self, initial: T, limit: int = 100) -> None:
        self._undo: List[T] = []
        self._redo: List[T] = []
        self._current = initial
        self._limit = limit

    @property
    def value(self) -> T:
        return self._current

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def update(self, new_value: T) -> bool:
        """Record new_value as the current state.

        Returns:
            False when new_value equals the current value (nothing recorded)
        """
        if new_value == self._current:
            return False
        self._undo.append(self._current)
        if len(self._undo) > self._limit:
            self._undo.pop(0)
        self._redo.clear()
        self._current = new_value
        return True

    def undo(self) -> T:
        if self._undo:
            self._redo.append(self._current)
            self._current = self._undo.pop()
        return self._current

    def redo(self) -> T:
        if self._redo:
            self._undo.append(self._current)
            self._current = self._redo.pop()
        return self._current
