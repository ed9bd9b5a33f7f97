"""
Scanning layer for the TeX math reader.

This module provides the character-level cursor the parser drives:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Lexer: Scanning helpers on top of a CharacterStream (ignorables, literals,
        control sequences, raw text runs).

Features:
    - Skips whitespace and `%` line comments anywhere
    - Reads control sequences: `\\name` for letter runs, `\\c` for one non-letter
    - Supports backtracking via `mark()` / `reset()`

Example:
    >>> lexer = Lexer(CharacterStream("\\\\alpha + 1"))
    >>> lexer.read_control_sequence()
    '\\\\alpha'

Exports:
    - CharacterStream
    - Lexer
    - Mark
"""

Mark = tuple[int, int, int]
"""A saved (position, line, column) triple."""


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def current(self) -> str | None:
        return self.source[self.position] if self.position < len(self.source) else None

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)

    def mark(self) -> Mark:
        return (self.position, self.line, self.column)

    def reset(self, mark: Mark) -> None:
        self.position, self.line, self.column = mark


class Lexer:
    """Scanning helpers used by the recursive-descent parser.

    The parser is scannerless: it asks the lexer for the next character, literal or
    control sequence at the point it needs one, and backtracks with `mark`/`reset`.

    Attributes:
        stream (CharacterStream): The source stream being scanned.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    @property
    def position(self) -> int:
        return self.stream.position

    def peek(self, offset: int = 0) -> str:
        """Returns an upcoming character without consuming it ('' at EOF)."""
        return self.stream.peek(offset)

    def advance(self, count: int = 1) -> str:
        """Consumes `count` characters (stopping at EOF) and returns them."""
        out = ""
        for _ in range(count):
            if self.stream.end_of_file():
                break
            out += self.stream.next()
        return out

    def end_of_file(self) -> bool:
        return self.stream.end_of_file()

    def mark(self) -> Mark:
        return self.stream.mark()

    def reset(self, mark: Mark) -> None:
        self.stream.reset(mark)

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek().isspace():
            self.advance()

    def skip_comment(self) -> None:
        """Advances past a `%` comment, including its terminating newline."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()
        if self.peek() == "\n":
            self.advance()

    def skip_ignorable(self) -> None:
        """Skips any mix of whitespace and comments."""
        while True:
            self.skip_whitespace()
            if self.peek() == "%":
                self.skip_comment()
            else:
                break

    def startswith(self, literal: str) -> bool:
        source = self.stream.source
        pos = self.stream.position
        return source.startswith(literal, pos)

    def match(self, literal: str) -> bool:
        """Consumes `literal` if the input continues with it.

        Returns:
            bool: True if the literal was consumed, False otherwise.
        """
        if literal and self.startswith(literal):
            self.advance(len(literal))
            return True
        return False

    def read_control_sequence(self) -> str | None:
        """Reads a control sequence such as `\\frac`, `\\{` or `\\,`.

        Returns:
            str | None: The control sequence including its backslash, or None if the
            input does not start one (nothing is consumed in that case).
        """
        if self.peek() != "\\" or self.peek(1) == "":
            return None
        first = self.peek(1)
        if not (first.isascii() and first.isalpha()):
            return self.advance(2)
        mark = self.mark()
        self.advance()
        name = ""
        while self.peek().isascii() and self.peek().isalpha():
            name += self.advance()
        if not name:  # pragma: no cover
            self.reset(mark)
            return None
        return "\\" + name

    def peek_control_sequence(self) -> str | None:
        """Like `read_control_sequence` but leaves the cursor where it was."""
        mark = self.mark()
        cmd = self.read_control_sequence()
        self.reset(mark)
        return cmd

    def read_until(self, stop: str) -> str:
        """Consumes raw characters up to (not including) `stop` or EOF."""
        out = ""
        while not self.stream.end_of_file() and self.peek() != stop:
            out += self.advance()
        return out


__all__ = ["CharacterStream", "Lexer", "Mark"]
