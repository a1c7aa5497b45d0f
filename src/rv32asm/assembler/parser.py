"""
RV32I Statement Grouping
========================

This module groups the flat token list produced by the lexer into
statements. Both assembler passes walk the same statement list, so the
program counter advances identically in each.

Statement Types
---------------
1. **LabelDef**: A label definition
   ```asm
   loop:
   ```

2. **Instruction**: A mnemonic with its operand tokens
   ```asm
   addi x1, x1, 1
   sw   x1, 4(x2)
   beq  x1, x2, loop
   ```

3. **Directive**: An assembler directive with its argument tokens
   ```asm
   .org 0x100
   ```

Operand Boundaries
------------------
An instruction's operands are the tokens following its mnemonic, up to
the next label, directive or mnemonic. Label references such as ``loop``
in ``beq x1, x2, loop`` are lexed as mnemonic-kind words, so a word
directly after a comma is kept as an operand rather than starting a new
instruction.

Operand shapes are not checked here; the code generator consumes them
according to each instruction's format.
"""

from dataclasses import dataclass, field
from typing import Optional

from rv32asm.errors import OperandResolutionError, SourceLocation
from rv32asm.assembler.lexer import Token, TokenType, tokenize


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all grouped statements.

    Every statement keeps the token it starts with for error reporting.
    """
    token: Token

    @property
    def location(self) -> SourceLocation:
        return self.token.location

    @property
    def source_line(self) -> str:
        return self.token.source_line


@dataclass
class LabelDef(Statement):
    """
    Label definition statement.

    Attributes:
        name: Label name (case-sensitive, without the colon)
    """
    name: str


@dataclass
class Instruction(Statement):
    """
    Machine instruction statement.

    Attributes:
        mnemonic: The mnemonic as written in source
        operands: Operand tokens, punctuation included
    """
    mnemonic: str
    operands: list[Token] = field(default_factory=list)


@dataclass
class Directive(Statement):
    """
    Assembler directive statement.

    Attributes:
        name: Directive name including the dot, lower-cased
        arguments: Argument tokens
    """
    name: str
    arguments: list[Token] = field(default_factory=list)


# Token types that always begin a new statement
STATEMENT_STARTS = frozenset({TokenType.LABEL, TokenType.DIRECTIVE})


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Groups RV32I tokens into statements.

    Usage:
        tokens = tokenize(source, filename)
        statements = Parser(tokens).parse()
    """

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Group all tokens into statements.

        Returns:
            Statements in source order

        Raises:
            OperandResolutionError: If an operand appears with no
                instruction or directive before it
        """
        statements: list[Statement] = []

        while not self._at_end():
            token = self._advance()

            if token.type == TokenType.LABEL:
                statements.append(LabelDef(token, token.text))

            elif token.type == TokenType.DIRECTIVE:
                arguments = self._collect(allow_words_after_comma=False)
                statements.append(Directive(token, token.text.lower(), arguments))

            elif token.type == TokenType.MNEMONIC:
                operands = self._collect(allow_words_after_comma=True)
                statements.append(Instruction(token, token.text, operands))

            else:
                raise OperandResolutionError(
                    f"unexpected '{token.text}' outside an instruction",
                    location=token.location,
                    source_line=token.source_line,
                )

        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _peek(self) -> Optional[Token]:
        if self._at_end():
            return None
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _collect(self, allow_words_after_comma: bool) -> list[Token]:
        """
        Collect tokens up to the start of the next statement.

        Args:
            allow_words_after_comma: Keep a mnemonic-kind word as an operand
                when it directly follows a comma (label references)
        """
        collected: list[Token] = []

        while not self._at_end():
            token = self._peek()
            if token.type in STATEMENT_STARTS:
                break
            if token.type == TokenType.MNEMONIC:
                after_comma = bool(collected) and collected[-1].type == TokenType.COMMA
                if not (allow_words_after_comma and after_comma):
                    break
            collected.append(self._advance())

        return collected


def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """
    Tokenize and group source text in one step.

    Args:
        source: Assembly source code
        filename: Name for error messages

    Returns:
        Statements in source order
    """
    return Parser(tokenize(source, filename)).parse()
