"""
rv32asm Command-Line Interface
==============================

This package provides the command-line tool for the assembler:

- **rvasm**: RV32I assembler

The tool is a Click-based CLI application with help text and
consistent error reporting.
"""

__all__ = ["rvasm"]
