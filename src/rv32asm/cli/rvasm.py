"""
rvasm - RV32I Assembler Command-Line Interface
==============================================

This module implements the command-line interface for the RV32I
assembler.

Usage Examples
--------------
Basic assembly (writes program.s.hex):
    $ rvasm program.s

With output file:
    $ rvasm program.s -o program.hex

Listing and symbol table:
    $ rvasm program.s -l program.lst -s program.sym

Verbose mode:
    $ rvasm -v program.s
"""

import logging
from pathlib import Path
from typing import Optional

import click

from rv32asm import __version__
from rv32asm.assembler import Assembler
from rv32asm.cli.errors import report_error

logger = logging.getLogger(__name__)

# Appended to the input filename to name the default output
HEX_SUFFIX = ".hex"


def default_output_path(input_file: Path) -> Path:
    """Derive the output path by appending .hex to the input filename."""
    return input_file.with_name(input_file.name + HEX_SUFFIX)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output hex file (default: INPUT_FILE.hex)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--wrap-immediates",
    is_flag=True,
    help="Truncate out-of-range immediates and offsets to their field "
         "width instead of reporting an error",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="rvasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    wrap_immediates: bool,
    verbose: bool,
) -> None:
    """
    Assemble RV32I source code into hex machine words.

    INPUT_FILE is the assembly source file to assemble. The output has
    one 32-bit word per line as 8 lower-case hex digits.

    \b
    Examples:
        rvasm program.s              # Outputs program.s.hex
        rvasm program.s -o out.hex   # Specify output file
        rvasm -l out.lst program.s   # Also write a listing
    """
    setup_logging(verbose)

    output_file = output if output is not None else default_output_path(input_file)
    asm = Assembler(verbose=verbose, wrap_immediates=wrap_immediates)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        words = asm.assemble_file(input_file)

        # Auxiliary files first: a failure there must not leave a hex file
        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        asm.write_hex(output_file)
        click.echo(f"Wrote {len(words)} words to {output_file}")
        if verbose:
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        report_error(e, verbose=verbose)


if __name__ == "__main__":
    main()
