from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class Delimiter:
    """Opening/closing tag markers.

    A parse pass owns one instance and updates it in place whenever a
    delimiter-change tag is read.
    """
    left: str = "{{"
    right: str = "}}"

    def copy(self) -> Delimiter:
        return Delimiter(self.left, self.right)


class TokenType(Enum):
    TEXT = "text"
    VARIABLE = "variable"
    UNESCAPED_VARIABLE = "unescaped_variable"
    SECTION_OPEN = "section_open"
    INVERTED_SECTION_OPEN = "inverted_section_open"
    SECTION_CLOSE = "section_close"
    PARTIAL = "partial"
    COMMENT = "comment"
    DELIMITER_CHANGE = "delimiter_change"


# Tag types whose line is elided when it holds nothing but whitespace
STANDALONE_TYPES = frozenset({
    TokenType.COMMENT,
    TokenType.SECTION_OPEN,
    TokenType.INVERTED_SECTION_OPEN,
    TokenType.SECTION_CLOSE,
    TokenType.PARTIAL,
    TokenType.DELIMITER_CHANGE,
})

SECTION_TYPES = frozenset({TokenType.SECTION_OPEN, TokenType.INVERTED_SECTION_OPEN})


@dataclass(eq=False)
class Token:
    """One scanned piece of a template.

    - TEXT tokens reference their span of ``template`` rather than copying it
    - tag tokens carry the trimmed tag body in ``name``
    - section tokens collect their body in ``children`` and remember the
      inclusive bounds of their raw body text for lambda sections
    """
    type: TokenType
    template: str = field(repr=False)
    start_index: int
    length: int = 0
    name: str = ""
    is_beginning_of_line: bool = False
    # Leading whitespace of a standalone partial tag
    indent: str = ""
    # Marker pair set by a DELIMITER_CHANGE tag
    delimiter: Delimiter | None = None
    children: list[Token] = field(default_factory=list, repr=False)
    body_start_index: int = 0
    body_end_index: int = -1

    @property
    def text(self) -> str:
        return self.template[self.start_index:self.start_index + self.length]

    @property
    def section_text(self) -> str:
        """Raw, unparsed text between a section's open and close tags."""
        return self.template[self.body_start_index:self.body_end_index + 1]
