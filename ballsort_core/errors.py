from __future__ import annotations


class BallSortError(Exception):
    """Base class for puzzle invariant violations."""


class EmptyHolder(BallSortError):
    """Raised when the top of an empty holder is removed."""


class CapacityExceeded(BallSortError):
    """Raised when a ball is pushed onto a full holder."""


class InvalidSelection(BallSortError):
    """Raised when a holder id does not belong to the current board."""


class InvalidPhase(BallSortError):
    """Raised when a move or undo is requested outside the playing phase."""
