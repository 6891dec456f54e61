from __future__ import annotations


class Scanner:
    """Forward-moving cursor over an immutable template string.

    The scanner knows nothing about tags; the parser drives it.
    """

    # Returned by peek() past either end of the text
    EOF = ""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        if 0 <= index < len(self.text):
            return self.text[index]
        return self.EOF

    def seek(self, n: int) -> bool:
        """Advance by n characters. Returns False once the end is reached."""
        self.pos = min(self.pos + n, len(self.text))
        return self.pos < len(self.text)

    def starts_with(self, literal: str) -> bool:
        return self.text.startswith(literal, self.pos)

    def seek_until_just_before(self, literal: str) -> None:
        """Move to the next occurrence of literal.

        Raises ValueError (as str.index does) when literal never occurs.
        """
        self.pos = self.text.index(literal, self.pos)

    def read_until_just_before(self, literal: str) -> str:
        begin = self.pos
        self.seek_until_just_before(literal)
        return self.text[begin:self.pos]
