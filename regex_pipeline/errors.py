from typing import Optional


class RegexError(ValueError):
    """Base class for every failure raised while compiling a regex."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self):
        if self.position is None:
            return self.message
        return f"{self.message} at position {self.position}"


class LexError(RegexError):
    """A character sequence that cannot be turned into a token."""


class StructuralError(RegexError):
    """Unbalanced grouping, misplaced operator or empty pattern/group."""


class BuildError(RegexError):
    """
    Internal invariant violation during Thompson construction.

    Validation is expected to reject every input that could trigger this,
    so seeing one points at a validator bug rather than at user input.
    """


class AutomatonTooLargeError(RegexError):
    """Subset construction produced more DFA states than allowed."""
