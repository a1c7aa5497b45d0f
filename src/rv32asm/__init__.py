"""
rv32asm - Two-Pass Assembler for RV32I
======================================

This package translates assembly programs for the RISC-V RV32I base
integer instruction set into 32-bit machine words, written as
hexadecimal text with one word per line.

Main Components
---------------
- **cpu**: RV32I instruction and register tables
    Mnemonic -> format/opcode/funct3/funct7, register name -> number

- **assembler**: Lexer, statement grouping, two-pass code generator
    Converts assembly source (.s) to hex text (.hex)

- **cli**: Command-line tool (rvasm)

Quick Start
-----------
Assemble a program:
    >>> from rv32asm import Assembler
    >>> asm = Assembler()
    >>> words = asm.assemble_file("program.s")
    >>> asm.write_hex("program.s.hex")

Or use the command-line tool:
    $ rvasm program.s
"""

__version__ = "1.0.0"

from rv32asm.assembler import Assembler, assemble, assemble_file
from rv32asm.cpu import (
    InstructionFormat,
    InstructionDef,
    lookup_instruction,
    lookup_register,
)
from rv32asm.errors import (
    RV32Error,
    AssemblerError,
    SourceLocation,
    LexError,
    DuplicateLabelError,
    UnknownInstructionError,
    UndefinedLabelError,
    MisalignedOffsetError,
    OffsetRangeError,
    UnexpectedEndOfInputError,
    OperandResolutionError,
    ImmediateRangeError,
    DirectiveError,
    IoError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # ISA tables
    "InstructionFormat",
    "InstructionDef",
    "lookup_instruction",
    "lookup_register",
    # Exception hierarchy
    "RV32Error",
    "AssemblerError",
    "SourceLocation",
    "LexError",
    "DuplicateLabelError",
    "UnknownInstructionError",
    "UndefinedLabelError",
    "MisalignedOffsetError",
    "OffsetRangeError",
    "UnexpectedEndOfInputError",
    "OperandResolutionError",
    "ImmediateRangeError",
    "DirectiveError",
    "IoError",
]
