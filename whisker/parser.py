"""Template parsing in three passes.

tokenize() produces a flat token list, squash() drops whitespace around
standalone tags, nest() folds sections into a tree. parse() runs all three.
"""

from __future__ import annotations

import logging

from .errors import (
    InvalidDelimiterError,
    MismatchedSectionCloseError,
    UnclosedSectionError,
    UnclosedTagError,
    UnmatchedSectionCloseError,
)
from .scanner import Scanner
from .types import SECTION_TYPES, STANDALONE_TYPES, Delimiter, Token, TokenType

logger = logging.getLogger(__name__)

_TAG_TYPES: dict[str, TokenType] = {
    "#": TokenType.SECTION_OPEN,
    "^": TokenType.INVERTED_SECTION_OPEN,
    "/": TokenType.SECTION_CLOSE,
    "&": TokenType.UNESCAPED_VARIABLE,
    "{": TokenType.UNESCAPED_VARIABLE,
    ">": TokenType.PARTIAL,
    "!": TokenType.COMMENT,
    "=": TokenType.DELIMITER_CHANGE,
}


def tag_type(marker: str) -> TokenType:
    """Classify a tag by the first character after the opening delimiter."""
    return _TAG_TYPES.get(marker, TokenType.VARIABLE)


def tokenize(template: str, delimiter: Delimiter) -> list[Token]:
    """Scan template into a flat token list.

    ``delimiter`` is updated in place by delimiter-change tags. Newlines
    always end the current text token so that every line starts a new one.
    """
    scanner = Scanner(template)
    tokens: list[Token] = []
    start = 0
    line_start = 0

    def push_text(end: int) -> None:
        if start < end:
            tokens.append(Token(
                type=TokenType.TEXT,
                template=template,
                start_index=start,
                length=end - start,
                is_beginning_of_line=start == line_start,
            ))

    ok = bool(template)
    while ok:
        if scanner.pos == 0 or scanner.peek(-1) == "\n":
            line_start = scanner.pos

        if scanner.peek() == "\n":
            push_text(scanner.pos + 1)
            start = scanner.pos + 1
            ok = scanner.seek(1)
        elif scanner.starts_with(delimiter.left):
            push_text(scanner.pos)
            start = scanner.pos
            token = _read_tag(scanner, template, delimiter, start)
            token.is_beginning_of_line = start == line_start
            tokens.append(token)
            start = scanner.pos + len(delimiter.right)
            token.body_start_index = start
            ok = scanner.seek(len(delimiter.right))
            if token.type is TokenType.DELIMITER_CHANGE:
                # Only scanning after this tag sees the new markers
                delimiter.left = token.delimiter.left
                delimiter.right = token.delimiter.right
        else:
            ok = scanner.seek(1)

    push_text(len(template))
    return tokens


def _read_tag(scanner: Scanner, template: str, delimiter: Delimiter, start: int) -> Token:
    """Read one tag, leaving the scanner just before its closing delimiter."""
    scanner.seek(len(delimiter.left))
    marker = scanner.peek()
    kind = tag_type(marker)
    if kind is not TokenType.VARIABLE:
        scanner.seek(1)

    if kind is TokenType.DELIMITER_CHANGE:
        closing = "=" + delimiter.right
    elif marker == "{":
        closing = "}" + delimiter.right
    else:
        closing = delimiter.right

    try:
        body = scanner.read_until_just_before(closing)
    except ValueError:
        raise UnclosedTagError(f"Unclosed tag, expected {closing!r}", start) from None
    scanner.seek(len(closing) - len(delimiter.right))
    if not scanner.starts_with(delimiter.right):
        raise UnclosedTagError(f"Unclosed tag, expected {delimiter.right!r}", scanner.pos)

    token = Token(type=kind, template=template, start_index=start, name=body.strip())
    if kind is TokenType.DELIMITER_CHANGE:
        markers = body.split()
        if len(markers) != 2:
            raise InvalidDelimiterError(
                f"Delimiter change needs exactly two markers, got {body.strip()!r}", start
            )
        token.delimiter = Delimiter(markers[0], markers[1])
    return token


def squash(tokens: list[Token]) -> list[Token]:
    """Remove the whitespace around standalone tags.

    Tokens are grouped into lines. A line holding at least one standalone tag
    type, no other tag, and only whitespace text loses its text tokens; a
    partial on such a line keeps the leading whitespace as its indent.
    """
    removed: set[int] = set()
    kinds: set[TokenType] = set()
    line_begin = 0

    for i, token in enumerate(tokens):
        kinds.add(token.type)
        if i + 1 < len(tokens) and not tokens[i + 1].is_beginning_of_line:
            continue

        line = range(line_begin, i + 1)
        kinds_ok = kinds & STANDALONE_TYPES and kinds <= STANDALONE_TYPES | {TokenType.TEXT}
        if kinds_ok and all(
            not tokens[j].text.strip() for j in line if tokens[j].type is TokenType.TEXT
        ):
            whitespace: list[str] = []
            for j in line:
                if tokens[j].type is TokenType.TEXT:
                    whitespace.append(tokens[j].text)
                    removed.add(j)
                elif tokens[j].type is TokenType.PARTIAL:
                    tokens[j].indent += "".join(whitespace)

        kinds = set()
        line_begin = i + 1

    return [token for i, token in enumerate(tokens) if i not in removed]


def nest(tokens: list[Token]) -> list[Token]:
    """Fold section tokens and their bodies into a tree.

    Close tags are consumed; comments and delimiter changes are dropped since
    they render nothing.
    """
    root: list[Token] = []
    collector = root
    sections: list[Token] = []

    for token in tokens:
        if token.type in SECTION_TYPES:
            token.children = []
            collector.append(token)
            sections.append(token)
            collector = token.children
        elif token.type is TokenType.SECTION_CLOSE:
            if not sections:
                raise UnmatchedSectionCloseError(
                    f"Close tag for {token.name!r} without an open section", token.start_index
                )
            section = sections.pop()
            if section.name != token.name:
                raise MismatchedSectionCloseError(
                    f"Section {section.name!r} closed by {token.name!r}", token.start_index
                )
            section.body_end_index = token.start_index - 1
            collector = sections[-1].children if sections else root
        elif token.type in (TokenType.COMMENT, TokenType.DELIMITER_CHANGE):
            continue
        else:
            collector.append(token)

    if sections:
        section = sections[-1]
        raise UnclosedSectionError(f"Unclosed section {section.name!r}", section.start_index)
    return root


def parse(template: str, delimiter: Delimiter | None = None) -> tuple[list[Token], Delimiter]:
    """Parse template into a token tree.

    Returns the tree and the delimiter pair in effect at the end of the text.
    The given delimiter is not modified.
    """
    current = delimiter.copy() if delimiter is not None else Delimiter()
    tokens = nest(squash(tokenize(template, current)))
    logger.debug("Parsed %d top-level tokens from %d characters", len(tokens), len(template))
    return tokens, current
