"""
RV32I Instruction Set Definition
================================

This module defines the subset of the RV32I base integer instruction set
understood by the assembler, the register names it accepts, and the
pseudo-instructions layered on top.

Instruction Formats
-------------------
Every RV32I instruction is one 32-bit word. The format decides which
fields exist and where the immediate bits live:

| Format | Used by                     | Immediate             |
|--------|-----------------------------|-----------------------|
| R      | register-register ALU ops   | none                  |
| I      | ALU-immediate, loads, jalr  | 12-bit signed         |
| S      | stores                      | 12-bit signed, split  |
| B      | conditional branches        | 13-bit signed, even   |
| U      | lui, auipc                  | upper 20 bits         |
| J      | jal                         | 21-bit signed, even   |

Pseudo-Instructions
-------------------
Pseudo-instructions have no encoding of their own. Each carries an
expansion rule naming the real instruction it becomes and the fixed
operands it supplies:

    nop         ->  addi x0, x0, 0
    mv rd, rs   ->  addi rd, rs, 0
    not rd, rs  ->  xori rd, rs, -1

Reference
---------
- The RISC-V Instruction Set Manual, Volume I: Unprivileged ISA
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Instruction Format Enumeration
# =============================================================================

class InstructionFormat(Enum):
    """RV32I instruction formats, plus PSEUDO for expanded mnemonics."""
    R = auto()
    I = auto()
    S = auto()
    B = auto()
    U = auto()
    J = auto()
    PSEUDO = auto()

    def __str__(self) -> str:
        return f"{self.name}-type" if self is not InstructionFormat.PSEUDO else "pseudo"


class OperandSyntax(Enum):
    """
    Operand shape of an instruction.

    Most formats have exactly one shape; I-format has three.
    """
    REGISTERS = auto()      # op rd, rs1, rs2
    REG_REG_IMM = auto()    # op rd, rs1, imm
    SHIFT = auto()          # op rd, rs1, shamt
    LOAD = auto()           # op rd, imm(rs1)
    STORE = auto()          # op rs2, imm(rs1)
    BRANCH = auto()         # op rs1, rs2, label
    REG_IMM = auto()        # op rd, imm
    JUMP = auto()           # op rd, label
    NONE = auto()           # op
    REG_REG = auto()        # op rd, rs


# =============================================================================
# Instruction Definitions
# =============================================================================

@dataclass(frozen=True)
class PseudoExpansion:
    """
    Expansion rule for a pseudo-instruction.

    Attributes:
        base: Mnemonic of the real instruction emitted
        immediate: Fixed immediate supplied to the real instruction
        registers: Number of register operands taken from the source
                   (0 means rd and rs1 are both x0)
    """
    base: str
    immediate: int
    registers: int


@dataclass(frozen=True)
class InstructionDef:
    """
    Encoding metadata for one mnemonic.

    Attributes:
        format: Instruction format (R, I, S, B, U, J or PSEUDO)
        opcode: 7-bit major opcode
        funct3: 3-bit minor opcode
        funct7: 7-bit function code (R-type and shift-immediates)
        syntax: Operand shape expected in source
        expansion: Expansion rule (pseudo-instructions only)
    """
    format: InstructionFormat
    opcode: int
    funct3: int = 0
    funct7: int = 0
    syntax: OperandSyntax = OperandSyntax.REGISTERS
    expansion: Optional[PseudoExpansion] = None

    def __repr__(self) -> str:
        return (
            f"InstructionDef({self.format.name}, opcode=0x{self.opcode:02x}, "
            f"funct3={self.funct3}, funct7=0x{self.funct7:02x})"
        )


def _r(funct3: int, funct7: int = 0x00) -> InstructionDef:
    return InstructionDef(InstructionFormat.R, 0x33, funct3, funct7, OperandSyntax.REGISTERS)


def _i(opcode: int, funct3: int, syntax: OperandSyntax = OperandSyntax.REG_REG_IMM,
       funct7: int = 0x00) -> InstructionDef:
    return InstructionDef(InstructionFormat.I, opcode, funct3, funct7, syntax)


def _pseudo(base: str, immediate: int, registers: int) -> InstructionDef:
    syntax = OperandSyntax.REG_REG if registers else OperandSyntax.NONE
    real = INSTRUCTION_TABLE[base]
    return InstructionDef(
        InstructionFormat.PSEUDO, real.opcode, real.funct3, real.funct7,
        syntax, PseudoExpansion(base, immediate, registers),
    )


# =============================================================================
# Instruction Table
# =============================================================================
# Key: lower-case mnemonic
# Value: InstructionDef(format, opcode, funct3, funct7, syntax)
# =============================================================================

INSTRUCTION_TABLE: dict[str, InstructionDef] = {
    # R-type: register-register ALU operations
    "add":   _r(0x0),
    "sub":   _r(0x0, 0x20),
    "xor":   _r(0x4),
    "or":    _r(0x6),
    "and":   _r(0x7),
    "sll":   _r(0x1),
    "srl":   _r(0x5),
    "sra":   _r(0x5, 0x20),
    "slt":   _r(0x2),
    "sltu":  _r(0x3),

    # I-type: ALU with immediate
    "addi":  _i(0x13, 0x0),
    "xori":  _i(0x13, 0x4),
    "ori":   _i(0x13, 0x6),
    "andi":  _i(0x13, 0x7),
    "slti":  _i(0x13, 0x2),
    "sltiu": _i(0x13, 0x3),

    # I-type: shifts by immediate (funct7 occupies imm[11:5])
    "slli":  _i(0x13, 0x1, OperandSyntax.SHIFT),
    "srli":  _i(0x13, 0x5, OperandSyntax.SHIFT),
    "srai":  _i(0x13, 0x5, OperandSyntax.SHIFT, funct7=0x20),

    # I-type: loads
    "lb":    _i(0x03, 0x0, OperandSyntax.LOAD),
    "lh":    _i(0x03, 0x1, OperandSyntax.LOAD),
    "lw":    _i(0x03, 0x2, OperandSyntax.LOAD),
    "lbu":   _i(0x03, 0x4, OperandSyntax.LOAD),
    "lhu":   _i(0x03, 0x5, OperandSyntax.LOAD),

    # I-type: indirect jump
    "jalr":  _i(0x67, 0x0),

    # S-type: stores
    "sb":    InstructionDef(InstructionFormat.S, 0x23, 0x0, syntax=OperandSyntax.STORE),
    "sh":    InstructionDef(InstructionFormat.S, 0x23, 0x1, syntax=OperandSyntax.STORE),
    "sw":    InstructionDef(InstructionFormat.S, 0x23, 0x2, syntax=OperandSyntax.STORE),

    # B-type: conditional branches
    "beq":   InstructionDef(InstructionFormat.B, 0x63, 0x0, syntax=OperandSyntax.BRANCH),
    "bne":   InstructionDef(InstructionFormat.B, 0x63, 0x1, syntax=OperandSyntax.BRANCH),
    "blt":   InstructionDef(InstructionFormat.B, 0x63, 0x4, syntax=OperandSyntax.BRANCH),
    "bge":   InstructionDef(InstructionFormat.B, 0x63, 0x5, syntax=OperandSyntax.BRANCH),
    "bltu":  InstructionDef(InstructionFormat.B, 0x63, 0x6, syntax=OperandSyntax.BRANCH),
    "bgeu":  InstructionDef(InstructionFormat.B, 0x63, 0x7, syntax=OperandSyntax.BRANCH),

    # U-type: upper immediates
    "lui":   InstructionDef(InstructionFormat.U, 0x37, syntax=OperandSyntax.REG_IMM),
    "auipc": InstructionDef(InstructionFormat.U, 0x17, syntax=OperandSyntax.REG_IMM),

    # J-type: jump and link
    "jal":   InstructionDef(InstructionFormat.J, 0x6F, syntax=OperandSyntax.JUMP),
}

# Pseudo-instructions reuse the encoding of the instruction they expand to
INSTRUCTION_TABLE.update({
    "nop": _pseudo("addi", 0, registers=0),
    "mv":  _pseudo("addi", 0, registers=2),
    "not": _pseudo("xori", -1, registers=2),
})

MNEMONICS: frozenset[str] = frozenset(INSTRUCTION_TABLE)

PSEUDO_INSTRUCTIONS: frozenset[str] = frozenset(
    name for name, info in INSTRUCTION_TABLE.items()
    if info.format is InstructionFormat.PSEUDO
)


# =============================================================================
# Register Table
# =============================================================================
# Numeric names x0-x31 plus the standard calling-convention aliases.
# fp is a second alias for s0.
# =============================================================================

_ABI_NAMES = (
    "zero", "ra", "sp", "gp", "tp", "t0", "t1", "t2",
    "s0", "s1", "a0", "a1", "a2", "a3", "a4", "a5",
    "a6", "a7", "s2", "s3", "s4", "s5", "s6", "s7",
    "s8", "s9", "s10", "s11", "t3", "t4", "t5", "t6",
)

REGISTER_TABLE: dict[str, int] = {f"x{n}": n for n in range(32)}
REGISTER_TABLE.update({name: n for n, name in enumerate(_ABI_NAMES)})
REGISTER_TABLE["fp"] = 8

REGISTER_NAMES: frozenset[str] = frozenset(REGISTER_TABLE)


# =============================================================================
# Lookup Functions
# =============================================================================

def lookup_instruction(mnemonic: str) -> Optional[InstructionDef]:
    """
    Look up the definition of a mnemonic (case-insensitive).

    Returns:
        The InstructionDef, or None if the mnemonic is unknown
    """
    return INSTRUCTION_TABLE.get(mnemonic.lower())


def lookup_register(name: str) -> Optional[int]:
    """
    Look up a register number by name or alias (case-insensitive).

    Returns:
        Register number 0-31, or None if the name is not a register
    """
    return REGISTER_TABLE.get(name.lower())


def is_valid_instruction(mnemonic: str) -> bool:
    """Check whether a mnemonic is in the instruction table."""
    return mnemonic.lower() in INSTRUCTION_TABLE


def is_register(name: str) -> bool:
    """Check whether a word names a register."""
    return name.lower() in REGISTER_TABLE


def is_pseudo_instruction(mnemonic: str) -> bool:
    """Check whether a mnemonic is a pseudo-instruction."""
    return mnemonic.lower() in PSEUDO_INSTRUCTIONS
