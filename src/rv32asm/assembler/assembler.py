"""
RV32I Assembler - Main Interface
================================

This module provides the Assembler class, the primary interface for
assembling RV32I source. It coordinates the lexer, statement grouping and
code generator, and writes the results.

Example Usage
-------------
>>> from rv32asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> words = asm.assemble_string('''
... loop:
...     addi x1, x1, 1
...     jal  x0, loop
... ''')
>>> [f"{w:08x}" for w in words]
['00108093', 'ffdff06f']
>>> asm.write_hex("loop.s.hex")

Command-Line Usage
------------------
    $ rvasm loop.s                  # writes loop.s.hex
    $ rvasm loop.s -o out.hex -l loop.lst -s loop.sym
"""

import logging
from pathlib import Path

from rv32asm.errors import IoError
from rv32asm.assembler.parser import parse_source
from rv32asm.assembler.codegen import AssembledWord, CodeGenerator
from rv32asm.assembler.output import (
    format_listing,
    format_symbols,
    write_hex,
    write_text,
)

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main RV32I assembler class.

    A run either completes or stops at the first error; output files are
    only written on request after a successful run.

    Attributes:
        verbose: If True, log each input as it is assembled
        wrap_immediates: Truncate out-of-range immediates instead of failing
    """

    def __init__(self, verbose: bool = False, wrap_immediates: bool = False):
        """
        Initialize the assembler.

        Args:
            verbose: Enable progress messages
            wrap_immediates: Reduce immediates and branch/jump offsets to
                             their field width by truncation instead of
                             raising ImmediateRangeError / OffsetRangeError
        """
        self._verbose = verbose
        self._codegen = CodeGenerator(wrap_immediates=wrap_immediates)
        self._source_file: Path | None = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The encoded 32-bit words in program order

        Raises:
            AssemblerError: If assembly fails
        """
        if self._verbose:
            logger.info("Assembling %s", filename)

        statements = parse_source(source, filename)
        logger.debug("Grouped %d statements", len(statements))

        return self._codegen.generate(statements)

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """
        Assemble source code from a file.

        The whole file is read before lexing starts.

        Raises:
            IoError: If the file cannot be read or is not valid UTF-8
            AssemblerError: If assembly fails
        """
        filepath = Path(filepath)
        self._source_file = filepath

        try:
            source = filepath.read_text(encoding="utf-8")
        except OSError as e:
            raise IoError(str(filepath), e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise IoError(str(filepath), f"not valid UTF-8 text ({e.reason})") from e

        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def get_words(self) -> list[int]:
        """Return the encoded words from the last run."""
        return self._codegen.get_words()

    def get_assembled(self) -> list[AssembledWord]:
        """Return the encoded words with their addresses and source lines."""
        return self._codegen.get_assembled()

    def get_symbols(self) -> dict[str, int]:
        """Return the symbol table as label name -> address."""
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """Return the assembly listing as a string."""
        return format_listing(self._codegen.get_assembled(), self._codegen.get_symbols())

    def get_source_file(self) -> Path | None:
        """Return the path of the last assembled file, if any."""
        return self._source_file

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_hex(self, filepath: str | Path) -> None:
        """Write the words as %08x hex text, one per line."""
        words = self.get_words()
        write_hex(words, filepath)
        logger.info("Hex file written to %s (%d words)", filepath, len(words))

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing."""
        write_text(self.get_listing(), filepath)
        logger.info("Listing written to %s", filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """Write the symbol table file."""
        write_text(format_symbols(self.get_symbols()), filepath)
        logger.info("Symbols written to %s", filepath)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", wrap_immediates: bool = False) -> list[int]:
    """
    Assemble source code and return its words.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(wrap_immediates=wrap_immediates)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path, wrap_immediates: bool = False) -> list[int]:
    """
    Assemble a file and return its words.

    Raises:
        IoError: If the file cannot be read
        AssemblerError: If assembly fails
    """
    asm = Assembler(wrap_immediates=wrap_immediates)
    return asm.assemble_file(filepath)
