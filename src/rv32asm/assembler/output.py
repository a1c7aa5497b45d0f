"""
Output Writers
==============

Serializes assembled words and auxiliary listings. This is the only part
of the assembler that writes files; it contains no encoding logic.

Hex Format
----------
One word per line, 8 lower-case hex digits, zero-padded, newline
terminated, in program order:

```
00700293
00112223
ffdff06f
```
"""

from pathlib import Path
from typing import Iterable, TextIO, Union

from rv32asm.errors import IoError
from rv32asm.assembler.codegen import AssembledWord

Destination = Union[str, Path, TextIO]

# Appended to the destination name while a file is being written
TEMP_SUFFIX = ".tmp"


def format_hex(words: Iterable[int]) -> str:
    """Format words as newline-terminated %08x lines."""
    return "".join(f"{word & 0xFFFFFFFF:08x}\n" for word in words)


def format_listing(assembled: Iterable[AssembledWord], symbols: dict[str, int]) -> str:
    """
    Format an assembly listing.

    Each line shows the address, the encoded word, the source line number
    and the source text, followed by the symbol table sorted by address.
    """
    lines = []
    lines.append("RV32I Assembler Listing")
    lines.append("=" * 60)
    lines.append("")
    lines.append("Address   Word      Line  Source")
    lines.append("-" * 60)
    for entry in assembled:
        lines.append(
            f"{entry.address:08x}  {entry.word:08x}  {entry.location.line:4d}  {entry.text}"
        )
    lines.append("")
    lines.append("Symbol Table")
    lines.append("-" * 30)
    for name, address in sorted(symbols.items(), key=lambda item: (item[1], item[0])):
        lines.append(f"{name:20s} = 0x{address:08x}")
    return "\n".join(lines) + "\n"


def format_symbols(symbols: dict[str, int]) -> str:
    """Format the symbol table as 'name 0xaddress' lines."""
    lines = ["# Symbol table", "# Generated by rvasm"]
    for name, address in sorted(symbols.items()):
        lines.append(f"{name} 0x{address:08x}")
    return "\n".join(lines) + "\n"


def write_text(text: str, destination: Destination) -> None:
    """
    Write text to a path or an open text stream.

    Paths are written through a sibling temporary file that replaces the
    destination only once the whole text is on disk, so a failed write
    never leaves a partial file under the destination name.

    Raises:
        IoError: If the destination cannot be opened or written
    """
    if hasattr(destination, "write"):
        try:
            destination.write(text)
        except OSError as e:
            raise IoError(getattr(destination, "name", "<stream>"), str(e)) from e
        return

    path = Path(destination)
    temp_path = path.with_name(path.name + TEMP_SUFFIX)
    try:
        with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise IoError(str(path), e.strerror or str(e)) from e


def write_hex(words: Iterable[int], destination: Destination) -> None:
    """
    Write words as hex text, one %08x word per line.

    Args:
        words: 32-bit words in program order
        destination: Output path or writable text stream

    Raises:
        IoError: If the destination cannot be opened or written
    """
    write_text(format_hex(words), destination)
