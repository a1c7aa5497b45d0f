"""
rvasm Error Reporting
=====================

Maps a failed assembly run to its message on stderr and its exit code.

Exit codes:
    0  assembled and all outputs written
    1  assembly error, or an input/output file could not be accessed
    2  bad command-line arguments (reported by click itself)
    3  unexpected internal error
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from rv32asm.errors import AssemblerError, IoError


class ExitCode(IntEnum):
    """Process exit status of rvasm."""
    SUCCESS = 0
    BUILD_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


def exit_code_for(error: Exception) -> ExitCode:
    """Classify an exception raised while assembling."""
    if isinstance(error, (AssemblerError, IoError)):
        return ExitCode.BUILD_ERROR
    return ExitCode.INTERNAL_ERROR


def format_error(error: Exception) -> str:
    """
    Render an exception for stderr.

    Assembler errors already carry "file:line:col: error:" and the source
    context; I/O errors get the tool name as prefix.
    """
    if isinstance(error, AssemblerError):
        return str(error)
    if isinstance(error, IoError):
        return f"rvasm: {error}"
    return f"rvasm: internal error: {error}"


def report_error(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Print the error and exit with its code.

    With verbose set, internal errors also print their traceback.
    """
    code = exit_code_for(error)
    click.echo(format_error(error), err=True)
    if verbose and code is ExitCode.INTERNAL_ERROR:
        traceback.print_exc()
    sys.exit(code)
