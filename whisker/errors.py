from __future__ import annotations


class WhiskerError(Exception):
    """Base class for every error raised while parsing or rendering."""


class TemplateSyntaxError(WhiskerError):
    """A template could not be parsed.

    ``position`` is the character offset in the template text where the
    problem was detected.
    """
    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} (at offset {position})")
        self.position = position


class UnclosedTagError(TemplateSyntaxError):
    """The closing delimiter of a tag never appears."""


class UnmatchedSectionCloseError(TemplateSyntaxError):
    """A close tag appears while no section is open."""


class MismatchedSectionCloseError(TemplateSyntaxError):
    """A close tag names a different section than the innermost open one."""


class UnclosedSectionError(TemplateSyntaxError):
    """The template ends while a section is still open."""


class InvalidDelimiterError(TemplateSyntaxError):
    """A delimiter-change tag does not hold exactly two markers."""


class RecursionLimitExceededError(WhiskerError):
    """Partial or lambda expansion nested deeper than the configured limit."""
    def __init__(self, limit: int) -> None:
        super().__init__(f"Template expansion exceeded maximum depth of {limit}")
        self.limit = limit
