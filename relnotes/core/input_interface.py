"""
Input interface for accepting raw changelog text with deterministic validation.

Module goals:
- Explicit validation to reject empty or oversized documents early.
- Deterministic normalization (newline canonicalization) so line numbers and
  rendered output are identical across platforms.
- Leading lines are preserved so reported line numbers match the file.
"""

from dataclasses import dataclass


class ChangelogError(Exception):
    """Base exception for all relnotes errors."""


class InputError(ChangelogError):
    """Base exception for input handling errors."""


class InputValidationError(InputError):
    """Raised when raw input fails validation constraints."""


class EmptyInputError(InputValidationError):
    """Raised when input is empty or whitespace-only."""


class MaxLengthExceededError(InputValidationError):
    """Raised when input exceeds the configured maximum length."""

    def __init__(self, *, max_length: int, actual_length: int) -> None:
        message = (
            f"Input length {actual_length} exceeds maximum allowed {max_length}. "
            "Rejecting oversized document."
        )
        super().__init__(message)
        self.max_length = max_length
        self.actual_length = actual_length


class MissingSourceError(InputValidationError):
    """Raised when the input source identifier is absent or blank."""


@dataclass(frozen=True)
class SourceDocument:
    """
    Immutable changelog text with its origin.

    Attributes:
        text: Normalized text (newlines canonicalized to ``\n``, trailing
            whitespace removed).
        source: Non-empty identifier for where the text came from (a path or
            ``stdin``).
    """

    text: str
    source: str

    @property
    def lines(self) -> list[str]:
        """Document split into lines, without line terminators."""

        return self.text.split("\n")


class InputInterface:
    """
    Deterministic interface for accepting and validating changelog text.

    Enforces non-empty input, a length bound, newline normalization and a
    required source before constructing an immutable SourceDocument.
    Performs no I/O.
    """

    def __init__(self, *, max_length: int = 1_000_000) -> None:
        if max_length <= 0:
            raise ValueError("max_length must be positive")
        self._max_length = max_length

    @property
    def max_length(self) -> int:
        """Maximum allowed input length after normalization."""

        return self._max_length

    def accept(self, raw_text: str, *, source: str) -> SourceDocument:
        """
        Validate and normalize raw text into a SourceDocument.

        Constraints:
        - Reject empty or whitespace-only input.
        - Enforce a bounded size (default 1_000_000 characters).
        - Normalize newlines to ``\n``.
        - Require a non-empty ``source``.
        """

        normalized_source = source.strip()
        if not normalized_source:
            raise MissingSourceError("source is required and cannot be empty")

        # Canonicalize newlines before trimming so length checks use normalized form.
        normalized_text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
        trimmed = normalized_text.rstrip()

        if not trimmed.strip():
            raise EmptyInputError(f"{normalized_source}: input must not be empty or whitespace-only")

        if len(trimmed) > self._max_length:
            raise MaxLengthExceededError(max_length=self._max_length, actual_length=len(trimmed))

        return SourceDocument(text=trimmed, source=normalized_source)
