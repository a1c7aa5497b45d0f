"""
RV32I Code Generator
====================

This module turns grouped statements into 32-bit machine words using a
two-pass process.

Pass 1 (Symbol Resolution)
--------------------------
- Walk the statements with the PC starting at 0
- Record each label's address in the symbol table
- Advance the PC by 4 per instruction; .org overrides it

Pass 2 (Binary Generation)
--------------------------
- Walk the same statements with the PC reset to 0
- Re-apply .org so PC-relative encodings see the right address
- Resolve operands and pack each instruction's fields into a word

Field Packing
-------------
Every format is built field by field with ``pack(value, offset, width)``,
which masks the value to ``width`` bits and shifts it into place. The
fields are OR-ed together:

```
 31        25 24    20 19    15 14  12 11         7 6       0
+------------+--------+--------+------+------------+---------+
|   funct7   |  rs2   |  rs1   |funct3|     rd     | opcode  |  R
|       imm[11:0]     |  rs1   |funct3|     rd     | opcode  |  I
| imm[11:5]  |  rs2   |  rs1   |funct3|  imm[4:0]  | opcode  |  S
|12| imm[10:5] | rs2  |  rs1   |funct3|imm[4:1]|11 | opcode  |  B
|              imm[31:12]             |     rd     | opcode  |  U
|20|  imm[10:1]  |11|  imm[19:12]     |     rd     | opcode  |  J
+------------+--------+--------+------+------------+---------+
```

Branch and jump offsets are byte distances from the address of the
instruction being encoded to its target label.
"""

from dataclasses import dataclass
import difflib
import logging
from typing import Optional

from rv32asm.errors import (
    DirectiveError,
    DuplicateLabelError,
    ImmediateRangeError,
    MisalignedOffsetError,
    OffsetRangeError,
    OperandResolutionError,
    SourceLocation,
    UndefinedLabelError,
    UnexpectedEndOfInputError,
    UnknownInstructionError,
)
from rv32asm.assembler.lexer import Token, TokenType
from rv32asm.assembler.parser import Directive, Instruction, LabelDef, Statement
from rv32asm.cpu import (
    InstructionDef,
    InstructionFormat,
    OperandSyntax,
    lookup_instruction,
    lookup_register,
)

logger = logging.getLogger(__name__)


ADDRESS_MASK = 0xFFFFFFFF
INSTRUCTION_SIZE = 4

# Signed byte reach of PC-relative fields
BRANCH_RANGE = (-4096, 4094)
JUMP_RANGE = (-(1 << 20), (1 << 20) - 2)

# Accepted source values per immediate field
I_IMMEDIATE_RANGE = (-2048, 2047)
SHIFT_AMOUNT_RANGE = (0, 31)
U_IMMEDIATE_RANGE = (-(1 << 19), (1 << 20) - 1)


# =============================================================================
# Bit Packing and Immediate Parsing
# =============================================================================

def pack(value: int, offset: int, width: int) -> int:
    """
    Mask value to width bits (zero-extending) and shift it to offset.

    >>> hex(pack(-1, 20, 12))
    '0xfff00000'
    """
    return (value & ((1 << width) - 1)) << offset


def parse_immediate(text: str) -> int:
    """
    Parse an immediate literal: optional sign, then decimal or 0x hex.

    Raises:
        ValueError: If the text is not a valid literal
    """
    body = text
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]

    if body[:2] in ("0x", "0X"):
        value = int(body[2:], 16)
    elif body.isdigit():
        value = int(body, 10)
    else:
        raise ValueError(f"invalid immediate '{text}'")

    return -value if negative else value


def to_signed32(value: int) -> int:
    """Interpret the low 32 bits of value as a two's complement integer."""
    value &= ADDRESS_MASK
    return value - (1 << 32) if value & 0x80000000 else value


# =============================================================================
# Format Encoders
# =============================================================================

def encode_r(info: InstructionDef, rd: int, rs1: int, rs2: int) -> int:
    """R-type: funct7 | rs2 | rs1 | funct3 | rd | opcode"""
    return (pack(info.opcode, 0, 7) | pack(rd, 7, 5) | pack(info.funct3, 12, 3)
            | pack(rs1, 15, 5) | pack(rs2, 20, 5) | pack(info.funct7, 25, 7))


def encode_i(info: InstructionDef, rd: int, rs1: int, imm: int) -> int:
    """I-type: imm[11:0] | rs1 | funct3 | rd | opcode"""
    return (pack(info.opcode, 0, 7) | pack(rd, 7, 5) | pack(info.funct3, 12, 3)
            | pack(rs1, 15, 5) | pack(imm, 20, 12))


def encode_s(info: InstructionDef, rs1: int, rs2: int, imm: int) -> int:
    """S-type: imm[11:5] | rs2 | rs1 | funct3 | imm[4:0] | opcode"""
    return (pack(info.opcode, 0, 7) | pack(imm, 7, 5) | pack(info.funct3, 12, 3)
            | pack(rs1, 15, 5) | pack(rs2, 20, 5) | pack(imm >> 5, 25, 7))


def encode_b(info: InstructionDef, rs1: int, rs2: int, offset: int) -> int:
    """B-type: imm[12] | imm[10:5] | rs2 | rs1 | funct3 | imm[4:1] | imm[11] | opcode"""
    return (pack(info.opcode, 0, 7) | pack(offset >> 11, 7, 1) | pack(offset >> 1, 8, 4)
            | pack(info.funct3, 12, 3) | pack(rs1, 15, 5) | pack(rs2, 20, 5)
            | pack(offset >> 5, 25, 6) | pack(offset >> 12, 31, 1))


def encode_u(info: InstructionDef, rd: int, imm: int) -> int:
    """U-type: imm[31:12] | rd | opcode"""
    return pack(info.opcode, 0, 7) | pack(rd, 7, 5) | pack(imm, 12, 20)


def encode_j(info: InstructionDef, rd: int, offset: int) -> int:
    """J-type: imm[20] | imm[10:1] | imm[11] | imm[19:12] | rd | opcode"""
    return (pack(info.opcode, 0, 7) | pack(rd, 7, 5) | pack(offset >> 12, 12, 8)
            | pack(offset >> 11, 20, 1) | pack(offset >> 1, 21, 10) | pack(offset >> 20, 31, 1))


# =============================================================================
# Symbol Table and Output Records
# =============================================================================

@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name (case-sensitive)
        address: Address the label resolved to in pass 1
        location: Where the label was defined
    """
    name: str
    address: int
    location: SourceLocation


@dataclass(frozen=True)
class AssembledWord:
    """
    One emitted word with the context needed for a listing.

    Attributes:
        address: PC of the instruction
        word: The 32-bit encoding
        location: Source location of the mnemonic
        text: Source line the instruction came from
    """
    address: int
    word: int
    location: SourceLocation
    text: str


# =============================================================================
# Operand Reader
# =============================================================================

class OperandReader:
    """
    Consumes the operand tokens of one instruction in order.

    Each accessor checks the kind of the next token and raises an
    AssemblerError naming the token and its line when it does not match.
    """

    def __init__(self, inst: Instruction):
        self._inst = inst
        self._tokens = inst.operands
        self._pos = 0

    def _next(self, expected: str) -> Token:
        if self._pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else self._inst.token
            raise UnexpectedEndOfInputError(
                f"unexpected end of input: '{self._inst.mnemonic}' expects {expected}",
                location=last.location,
                source_line=last.source_line,
            )
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _fail(self, token: Token, message: str) -> OperandResolutionError:
        return OperandResolutionError(
            f"{message} on line {token.line}",
            location=token.location,
            source_line=token.source_line,
        )

    def register(self) -> int:
        """Consume a register operand and return its number."""
        token = self._next("a register")
        number = lookup_register(token.text) if token.type == TokenType.REGISTER else None
        if number is None:
            raise self._fail(token, f"expected a register, got '{token.text}'")
        return number

    def immediate(self) -> tuple[int, Token]:
        """Consume an immediate operand and return (value, token)."""
        token = self._next("an immediate")
        if token.type != TokenType.IMMEDIATE:
            raise self._fail(token, f"expected an immediate, got '{token.text}'")
        try:
            return parse_immediate(token.text), token
        except ValueError:
            raise self._fail(token, f"invalid immediate '{token.text}'") from None

    def label(self) -> Token:
        """Consume a label reference."""
        token = self._next("a label")
        if token.type not in (TokenType.MNEMONIC, TokenType.REGISTER):
            raise self._fail(token, f"expected a label, got '{token.text}'")
        return token

    def expect(self, token_type: TokenType, text: str) -> None:
        """Consume a punctuation token."""
        token = self._next(f"'{text}'")
        if token.type != token_type:
            raise self._fail(token, f"expected '{text}', got '{token.text}'")

    def comma(self) -> None:
        self.expect(TokenType.COMMA, ",")

    def finish(self) -> None:
        """Check that no operand tokens are left over."""
        if self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            raise self._fail(
                token, f"unexpected operand '{token.text}' after '{self._inst.mnemonic}'"
            )


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates RV32I machine words from grouped statements.

    The code generator maintains:
    - Symbol table built in pass 1, read-only in pass 2
    - Program counter tracking for both passes
    - Output word buffer, appended to in pass 2

    Usage:
        codegen = CodeGenerator()
        words = codegen.generate(statements)
    """

    def __init__(self, wrap_immediates: bool = False):
        """
        Initialize the code generator.

        Args:
            wrap_immediates: Truncate out-of-range immediates and offsets to
                             their field width instead of raising an error
        """
        self._wrap_immediates = wrap_immediates
        self._symbols: dict[str, Symbol] = {}
        self._pc = 0
        self._words: list[AssembledWord] = []
        self._pass1_addresses: list[int] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, statements: list[Statement]) -> list[int]:
        """
        Assemble statements into machine words.

        Returns:
            The 32-bit words in program order

        Raises:
            AssemblerError: On the first error in either pass
        """
        self._symbols.clear()
        self._words.clear()
        self._pass1_addresses.clear()

        logger.info("Pass 1: symbol resolution")
        self._pass1(statements)
        logger.info("Pass 2: binary generation")
        self._pass2(statements)
        logger.info(
            "Assembled %d words, %d labels", len(self._words), len(self._symbols)
        )

        return self.get_words()

    def get_words(self) -> list[int]:
        """Return the encoded words in program order."""
        return [entry.word for entry in self._words]

    def get_assembled(self) -> list[AssembledWord]:
        """Return every emitted word with its address and source context."""
        return list(self._words)

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of label names to addresses."""
        return {name: sym.address for name, sym in self._symbols.items()}

    def get_pass1_addresses(self) -> list[int]:
        """
        Return the instruction addresses computed in pass 1.

        Label addresses are only correct if pass 1 walks the same PC
        trajectory that pass 2 encodes with; compare against the
        ``address`` of each entry from get_assembled() to check it.
        """
        return list(self._pass1_addresses)

    @property
    def wrap_immediates(self) -> bool:
        return self._wrap_immediates

    # =========================================================================
    # Pass 1: Symbol Resolution
    # =========================================================================

    def _pass1(self, statements: list[Statement]) -> None:
        self._pc = 0

        for stmt in statements:
            if isinstance(stmt, LabelDef):
                self._define_label(stmt)

            elif isinstance(stmt, Instruction):
                self._pass1_addresses.append(self._pc)
                self._advance_pc()

            elif isinstance(stmt, Directive):
                self._apply_directive(stmt, warn=True)

    def _define_label(self, label: LabelDef) -> None:
        """Record a label at the current PC."""
        existing = self._symbols.get(label.name)
        if existing is not None:
            raise DuplicateLabelError(
                label.name,
                location=label.location,
                original_location=existing.location,
                source_line=label.source_line,
            )

        self._symbols[label.name] = Symbol(label.name, self._pc, label.location)
        logger.debug("label %s = 0x%08x", label.name, self._pc)

    # =========================================================================
    # Pass 2: Binary Generation
    # =========================================================================

    def _pass2(self, statements: list[Statement]) -> None:
        self._pc = 0

        for stmt in statements:
            if isinstance(stmt, Instruction):
                word = self._encode_instruction(stmt)
                self._words.append(
                    AssembledWord(self._pc, word, stmt.location, stmt.source_line.strip())
                )
                logger.debug("0x%08x: %08x  %s", self._pc, word, stmt.source_line.strip())
                self._advance_pc()

            elif isinstance(stmt, Directive):
                self._apply_directive(stmt, warn=False)

    def _advance_pc(self) -> None:
        self._pc = (self._pc + INSTRUCTION_SIZE) & ADDRESS_MASK

    # =========================================================================
    # Directives
    # =========================================================================

    def _apply_directive(self, directive: Directive, warn: bool) -> None:
        """
        Apply a directive's effect on the PC.

        Only .org is understood; other directives are ignored, with a
        warning logged once (in pass 1).
        """
        if directive.name != ".org":
            if warn:
                logger.warning(
                    "%s: ignoring unsupported directive '%s'",
                    directive.location, directive.token.text,
                )
            return

        args = directive.arguments
        if len(args) != 1 or args[0].type != TokenType.IMMEDIATE:
            raise DirectiveError(
                ".org expects a single address",
                location=directive.location,
                hint="example: .org 0x100",
                source_line=directive.source_line,
            )

        try:
            address = parse_immediate(args[0].text)
        except ValueError:
            raise DirectiveError(
                f"invalid address '{args[0].text}'",
                location=args[0].location,
                source_line=directive.source_line,
            ) from None

        self._pc = address & ADDRESS_MASK

    # =========================================================================
    # Instruction Encoding
    # =========================================================================

    def _encode_instruction(self, inst: Instruction) -> int:
        """Resolve operands and encode one instruction."""
        info = lookup_instruction(inst.mnemonic)
        if info is None:
            raise UnknownInstructionError(
                inst.mnemonic, location=inst.location, source_line=inst.source_line
            )

        ops = OperandReader(inst)

        if info.format is InstructionFormat.PSEUDO:
            word = self._encode_pseudo(info, ops)
        else:
            word = self._encode_real(info, ops)

        ops.finish()
        return word

    def _encode_real(self, info: InstructionDef, ops: OperandReader) -> int:
        syntax = info.syntax

        if syntax is OperandSyntax.REGISTERS:
            rd = ops.register()
            ops.comma()
            rs1 = ops.register()
            ops.comma()
            rs2 = ops.register()
            return encode_r(info, rd, rs1, rs2)

        if syntax is OperandSyntax.REG_REG_IMM:
            rd = ops.register()
            ops.comma()
            rs1 = ops.register()
            ops.comma()
            imm = self._field_value(ops.immediate(), "I-type immediate", I_IMMEDIATE_RANGE, 12)
            return encode_i(info, rd, rs1, imm)

        if syntax is OperandSyntax.SHIFT:
            rd = ops.register()
            ops.comma()
            rs1 = ops.register()
            ops.comma()
            shamt = self._field_value(ops.immediate(), "shift amount", SHIFT_AMOUNT_RANGE, 5)
            return encode_i(info, rd, rs1, (info.funct7 << 5) | shamt)

        if syntax is OperandSyntax.LOAD:
            rd = ops.register()
            ops.comma()
            imm, rs1 = self._memory_operand(ops)
            return encode_i(info, rd, rs1, imm)

        if syntax is OperandSyntax.STORE:
            rs2 = ops.register()
            ops.comma()
            imm, rs1 = self._memory_operand(ops)
            return encode_s(info, rs1, rs2, imm)

        if syntax is OperandSyntax.BRANCH:
            rs1 = ops.register()
            ops.comma()
            rs2 = ops.register()
            ops.comma()
            offset = self._pc_relative(ops.label(), BRANCH_RANGE, 13)
            return encode_b(info, rs1, rs2, offset)

        if syntax is OperandSyntax.REG_IMM:
            rd = ops.register()
            ops.comma()
            imm = self._field_value(ops.immediate(), "U-type immediate", U_IMMEDIATE_RANGE, 20)
            return encode_u(info, rd, imm)

        if syntax is OperandSyntax.JUMP:
            rd = ops.register()
            ops.comma()
            offset = self._pc_relative(ops.label(), JUMP_RANGE, 21)
            return encode_j(info, rd, offset)

        raise ValueError(f"no encoder for operand syntax {syntax}")

    def _encode_pseudo(self, info: InstructionDef, ops: OperandReader) -> int:
        """
        Encode a pseudo-instruction through its expansion rule.

        The expansion names the real instruction; its definition supplies
        the opcode and function fields.
        """
        expansion = info.expansion
        base = lookup_instruction(expansion.base)

        rd = rs1 = 0
        if expansion.registers:
            rd = ops.register()
            ops.comma()
            rs1 = ops.register()

        return encode_i(base, rd, rs1, expansion.immediate)

    def _memory_operand(self, ops: OperandReader) -> tuple[int, int]:
        """Consume ``imm(rs1)`` and return (imm, rs1)."""
        imm = self._field_value(ops.immediate(), "offset", I_IMMEDIATE_RANGE, 12)
        ops.expect(TokenType.LPAREN, "(")
        rs1 = ops.register()
        ops.expect(TokenType.RPAREN, ")")
        return imm, rs1

    # =========================================================================
    # Value Resolution
    # =========================================================================

    def _field_value(
        self,
        parsed: tuple[int, Token],
        field: str,
        limits: tuple[int, int],
        width: int,
    ) -> int:
        """
        Range-check an immediate for its field.

        With wrap_immediates the value is truncated to width bits instead.
        """
        value, token = parsed
        minimum, maximum = limits
        if not self._wrap_immediates and not minimum <= value <= maximum:
            raise ImmediateRangeError(
                value, field, minimum, maximum,
                location=token.location,
                source_line=token.source_line,
            )
        return value & ((1 << width) - 1)

    def _pc_relative(self, token: Token, limits: tuple[int, int], width: int) -> int:
        """
        Compute the byte offset from the current instruction to a label.

        Returns:
            The offset masked to width bits
        """
        name = token.text
        symbol = self._symbols.get(name)
        if symbol is None:
            raise UndefinedLabelError(
                name,
                location=token.location,
                source_line=token.source_line,
                similar_labels=difflib.get_close_matches(name, list(self._symbols)),
            )

        offset = to_signed32(symbol.address - self._pc)
        if offset % 2 != 0:
            raise MisalignedOffsetError(
                name, offset, location=token.location, source_line=token.source_line
            )

        minimum, maximum = limits
        if not self._wrap_immediates and not minimum <= offset <= maximum:
            raise OffsetRangeError(
                name, offset, minimum, maximum,
                location=token.location,
                source_line=token.source_line,
            )

        return offset & ((1 << width) - 1)
