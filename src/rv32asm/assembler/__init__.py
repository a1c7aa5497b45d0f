"""
RV32I Assembler
===============

This package converts RV32I assembly text into 32-bit machine words.

Main Components
---------------
- **Assembler**: Main class that orchestrates the assembly process
- **Lexer**: Tokenizes assembly source into tokens
- **Parser**: Groups tokens into label, directive and instruction statements
- **CodeGenerator**: Two-pass symbol resolution and encoding
- **write_hex**: Serializes words as %08x text

Assembly Process
----------------
1. **Lexing**: source text -> tokens (LABEL, MNEMONIC, REGISTER, ...)
2. **Grouping**: tokens -> statements
3. **Pass 1**: label addresses into the symbol table
4. **Pass 2**: operands resolved, one word per instruction
5. **Output**: words -> hex text, one word per line

Example Usage
-------------
>>> from rv32asm.assembler import assemble
>>> [f"{w:08x}" for w in assemble("addi x5, x0, 7")]
['00700293']

Supported Features
------------------
- RV32I R, I, S, B, U and J formats
- ABI register aliases (zero, ra, sp, a0, ...)
- Pseudo-instructions nop, mv, not
- Forward and backward label references
- .org address origin directive
- Listing and symbol table output
"""

from rv32asm.assembler.assembler import Assembler, assemble, assemble_file
from rv32asm.assembler.lexer import Lexer, Token, TokenType, tokenize
from rv32asm.assembler.parser import (
    Parser,
    Statement,
    LabelDef,
    Instruction,
    Directive,
    parse_source,
)
from rv32asm.assembler.codegen import (
    CodeGenerator,
    AssembledWord,
    Symbol,
    pack,
    parse_immediate,
)
from rv32asm.assembler.output import format_hex, write_hex

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "Statement",
    "LabelDef",
    "Instruction",
    "Directive",
    "parse_source",
    # Code generator
    "CodeGenerator",
    "AssembledWord",
    "Symbol",
    "pack",
    "parse_immediate",
    # Output
    "format_hex",
    "write_hex",
]
