"""
rv32asm CPU Package
===================

This package contains the RV32I architecture definitions used by the
assembler: instruction formats, the mnemonic table, register names,
and the pseudo-instruction expansion rules.

Modules:
    rv32i: Instruction and register tables with their lookup functions.

Usage:
    from rv32asm.cpu import (
        InstructionFormat,
        InstructionDef,
        lookup_instruction,
        lookup_register,
    )
"""

from rv32asm.cpu.rv32i import (
    # Core types
    InstructionFormat,
    OperandSyntax,
    InstructionDef,
    PseudoExpansion,
    # Tables
    INSTRUCTION_TABLE,
    REGISTER_TABLE,
    MNEMONICS,
    PSEUDO_INSTRUCTIONS,
    REGISTER_NAMES,
    # Lookup functions
    lookup_instruction,
    lookup_register,
    is_valid_instruction,
    is_register,
    is_pseudo_instruction,
)

__all__ = [
    # Core types
    "InstructionFormat",
    "OperandSyntax",
    "InstructionDef",
    "PseudoExpansion",
    # Tables
    "INSTRUCTION_TABLE",
    "REGISTER_TABLE",
    "MNEMONICS",
    "PSEUDO_INSTRUCTIONS",
    "REGISTER_NAMES",
    # Lookup functions
    "lookup_instruction",
    "lookup_register",
    "is_valid_instruction",
    "is_register",
    "is_pseudo_instruction",
]
