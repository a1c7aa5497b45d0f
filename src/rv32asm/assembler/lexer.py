"""
RV32I Assembly Language Lexer
=============================

This module implements the lexer (tokenizer) for RV32I assembly. It
converts source text into an ordered list of tokens for the parser.

Token Types
-----------
- LABEL: A word immediately followed by ':' (the colon is not part of the text)
- MNEMONIC: Any other word that is not a register name
- REGISTER: x0-x31 or an ABI alias (zero, ra, sp, a0, ...)
- IMMEDIATE: Optional sign, then decimal digits or 0x/0X + hex digits
- DIRECTIVE: '.' followed by identifier characters (.org)
- COMMA, LPAREN, RPAREN: Punctuation

Comments start with '#' and run to the end of the line.

The lexer performs no semantic validation: an unknown mnemonic is still a
MNEMONIC token. Those checks belong to the code generator.

Tokens do not copy text. Each one records a [start, end) span into the
source buffer it was scanned from and slices it on demand through the
``text`` property.

Example
-------
>>> from rv32asm.assembler.lexer import Lexer
>>> for token in Lexer("loop: addi x1, x1, -1").tokenize():
...     print(token)
Token(LABEL, 'loop', 1:1)
Token(MNEMONIC, 'addi', 1:7)
Token(REGISTER, 'x1', 1:12)
Token(COMMA, ',', 1:14)
Token(REGISTER, 'x1', 1:16)
Token(COMMA, ',', 1:18)
Token(IMMEDIATE, '-1', 1:20)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional
import string

from rv32asm.cpu import lookup_register
from rv32asm.errors import LexError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for RV32I assembly."""
    LABEL = auto()       # name:
    MNEMONIC = auto()    # addi, beq, or a label reference
    REGISTER = auto()    # x5, t0
    IMMEDIATE = auto()   # 42, -8, 0x100
    COMMA = auto()       # ,
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    DIRECTIVE = auto()   # .org


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token: its type, a span into the source, and its position.

    Attributes:
        type: The TokenType classification
        start: Offset of the first character in the source
        end: Offset one past the last character
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
        source: The buffer the span refers to (not copied)
    """
    type: TokenType
    start: int
    end: int
    line: int
    column: int
    filename: str = "<input>"
    source: str = field(default="", repr=False, compare=False)

    @property
    def text(self) -> str:
        """The token's exact source text."""
        return self.source[self.start:self.end]

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def source_line(self) -> str:
        """The full source line containing this token."""
        line_start = self.source.rfind("\n", 0, self.start) + 1
        line_end = self.source.find("\n", self.start)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[line_start:line_end]

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes RV32I assembly source code.

    A single left-to-right scan with at most one character of lookahead.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())
    """

    # Characters that can start a word
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue a word or directive
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    PUNCTUATION = {
        ",": TokenType.COMMA,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects in source order

        Raises:
            LexError: If an unrecognized character is encountered
        """
        while not self._at_end():
            char = self._peek()

            if char == "#":
                self._skip_comment()
                continue

            if char.isspace():
                self._advance()
                continue

            yield self._scan_token()

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look ahead without advancing; empty string past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    @staticmethod
    def _is_digit(char: str) -> bool:
        # ASCII only; str.isdigit() also accepts '²' and '٣'
        return char != "" and char in string.digits

    def _advance_while(self, chars: str) -> None:
        # Note: '' in chars is True, so guard against end of input
        while self._peek() and self._peek() in chars:
            self._advance()

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(self, token_type: TokenType, start: int, column: int) -> Token:
        return Token(
            type=token_type,
            start=start,
            end=self._pos,
            line=self._line,
            column=column,
            filename=self.filename,
            source=self.source,
        )

    def _error(self, message: str, character: str = "",
               column: Optional[int] = None) -> LexError:
        """Create a LexError at the current (or given) column."""
        location = SourceLocation(self.filename, self._line, column or self._column)
        return LexError(
            message,
            character=character,
            location=location,
            source_line=self.get_current_line(),
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _skip_comment(self) -> None:
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    def _scan_token(self) -> Token:
        """Scan the next token; the current character is not whitespace."""
        start = self._pos
        column = self._column
        char = self._peek()

        if char in self.PUNCTUATION:
            self._advance()
            return self._make_token(self.PUNCTUATION[char], start, column)

        if char == ".":
            self._advance()
            self._advance_while(self.IDENT_CHARS)
            return self._make_token(TokenType.DIRECTIVE, start, column)

        if char in self.IDENT_START:
            return self._scan_word(start, column)

        if char in "+-" or self._is_digit(char):
            return self._scan_immediate(start, column)

        raise self._error(f"unexpected character '{char}'", character=char)

    def _scan_word(self, start: int, column: int) -> Token:
        """
        Scan a word and classify it.

        A word directly followed by ':' is a label; the colon is consumed
        but left out of the span. Otherwise the word is a register if it
        names one, else a mnemonic.
        """
        self._advance_while(self.IDENT_CHARS)
        end = self._pos

        if self._peek() == ":":
            token = self._make_token(TokenType.LABEL, start, column)
            self._advance()
            return token

        word = self.source[start:end]
        if lookup_register(word) is not None:
            return self._make_token(TokenType.REGISTER, start, column)
        return self._make_token(TokenType.MNEMONIC, start, column)

    def _scan_immediate(self, start: int, column: int) -> Token:
        """Scan an optionally signed decimal or 0x-prefixed hex literal."""
        if self._peek() in "+-":
            sign = self._advance()
            if not self._is_digit(self._peek()):
                raise self._error(f"expected digits after '{sign}'", character=sign,
                                  column=column)

        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance()
            self._advance()
            digits_start = self._pos
            self._advance_while(string.hexdigits)
            if self._pos == digits_start:
                raise self._error("expected hexadecimal digits after '0x'",
                                  character=self._peek(), column=column)
        else:
            self._advance_while(string.digits)

        return self._make_token(TokenType.IMMEDIATE, start, column)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_current_line(self) -> str:
        """Get the current line of source text (for error reporting)."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """
    Tokenize a complete source text.

    Args:
        source: The assembly source code
        filename: Name for error messages

    Returns:
        List of tokens in source order

    Raises:
        LexError: On the first unrecognized character
    """
    return list(Lexer(source, filename).tokenize())
