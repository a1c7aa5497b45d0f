"""
rv32asm Error Hierarchy
=======================

This module defines the exception hierarchy for the assembler. All
exceptions inherit from RV32Error, allowing callers to catch every
assembler-related failure with a single except clause.

Exception Hierarchy
-------------------
RV32Error (base)
├── AssemblerError (errors tied to a source location)
│   ├── LexError - unrecognized character in source
│   ├── DuplicateLabelError - label defined more than once
│   ├── UnknownInstructionError - mnemonic not in the ISA table
│   ├── UndefinedLabelError - branch/jump target never defined
│   ├── MisalignedOffsetError - odd branch/jump distance
│   ├── OffsetRangeError - branch/jump distance does not fit its field
│   ├── UnexpectedEndOfInputError - operands run past the end of input
│   ├── OperandResolutionError - operand is not the expected register/number
│   │   └── ImmediateRangeError - immediate does not fit its field
│   └── DirectiveError - malformed assembler directive
└── IoError (input cannot be read or output cannot be written)

Every error is fatal: the assembler stops at the first one and writes no
output for that run.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class RV32Error(Exception):
    """
    Base exception for all assembler errors.

        try:
            Assembler().assemble_file("program.s")
        except RV32Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source code, used for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(RV32Error):
    """
    Base exception for errors found while assembling source text.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Line number of the error, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            loop.s:4:17: error: undefined label 'lop'
                beq x1, x2, lop
                            ^
            hint: did you mean 'loop'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class LexError(AssemblerError):
    """
    Unrecognized or malformed lexical element.

    Raised by the lexer for characters outside the assembly alphabet,
    a sign with no digits after it, or a 0x prefix with no hex digits.
    """

    def __init__(
        self,
        message: str,
        character: str = "",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.character = character
        super().__init__(message, location=location, source_line=source_line)


class DuplicateLabelError(AssemblerError):
    """
    Label defined more than once.

    The first definition is never silently kept or overwritten; the
    error names where the label was originally defined.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownInstructionError(AssemblerError):
    """Mnemonic not present in the ISA table."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unknown instruction '{mnemonic}'",
            location=location,
            source_line=source_line,
        )


class UndefinedLabelError(AssemblerError):
    """
    Branch or jump target that is not in the symbol table.

    Similarly-named labels are offered as a hint to help catch typos.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MisalignedOffsetError(AssemblerError):
    """
    Branch or jump distance is odd.

    B- and J-format immediates drop bit 0, so every target must be a
    half-word (2-byte) multiple away from the instruction.
    """

    def __init__(
        self,
        target: str,
        offset: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        self.offset = offset
        super().__init__(
            f"offset to '{target}' is odd ({offset}); targets must be 2-byte aligned",
            location=location,
            hint="check the .org directives placing the target label",
            source_line=source_line,
        )


class OffsetRangeError(AssemblerError):
    """
    Branch or jump distance does not fit its immediate field.

    Branches reach -4096 to +4094 bytes, jal reaches -1048576 to
    +1048574 bytes from the instruction's own address.
    """

    def __init__(
        self,
        target: str,
        offset: int,
        minimum: int,
        maximum: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        self.offset = offset
        direction = "forward" if offset > 0 else "backward"
        super().__init__(
            f"target '{target}' is out of range (offset: {offset})",
            location=location,
            hint=f"{direction} reach is {minimum} to {maximum} bytes",
            source_line=source_line,
        )


class UnexpectedEndOfInputError(AssemblerError):
    """Operand tokens required by an instruction ran out."""
    pass


class OperandResolutionError(AssemblerError):
    """
    Operand token is not what the instruction format expects.

    Raised when a register lookup fails, an immediate cannot be parsed,
    a required comma or parenthesis is missing, or extra operands
    follow a complete instruction.
    """
    pass


class ImmediateRangeError(OperandResolutionError):
    """
    Immediate value does not fit its instruction field.

    Only raised when range checking is enabled (the default). With
    wrap_immediates=True values are truncated to the field width.
    """

    def __init__(
        self,
        value: int,
        field: str,
        minimum: int,
        maximum: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        self.field = field
        super().__init__(
            f"{field} value {value} out of range [{minimum}, {maximum}]",
            location=location,
            hint="use --wrap-immediates to truncate values to the field width",
            source_line=source_line,
        )


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Example:
        .org        ; Error: .org needs an address
    """
    pass


# =============================================================================
# I/O Exceptions
# =============================================================================

class IoError(RV32Error):
    """
    Input cannot be read or output cannot be written.

    Attributes:
        path: The file involved
        reason: Description of the underlying failure
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot access '{path}': {reason}")
