# =============================================================================
# test_parser.py - Statement Grouping Tests
# =============================================================================
# Tests for grouping lexer tokens into label, directive and instruction
# statements. Operand boundaries decide how far the program counter moves,
# so these tests pin down which words start new instructions.
# =============================================================================

import pytest
from rv32asm.assembler.lexer import TokenType, tokenize
from rv32asm.assembler.parser import (
    Directive,
    Instruction,
    LabelDef,
    Parser,
    parse_source,
)
from rv32asm.errors import OperandResolutionError


def operand_texts(stmt) -> list:
    return [t.text for t in stmt.operands]


class TestStatementGrouping:
    """Test how tokens are grouped into statements."""

    def test_empty(self):
        """No tokens, no statements."""
        assert parse_source("") == []

    def test_single_instruction(self):
        """A mnemonic owns the tokens after it."""
        statements = parse_source("addi x5, x0, 7")
        assert len(statements) == 1
        stmt = statements[0]
        assert isinstance(stmt, Instruction)
        assert stmt.mnemonic == "addi"
        assert operand_texts(stmt) == ["x5", ",", "x0", ",", "7"]

    def test_label_definition(self):
        """A label becomes its own statement."""
        statements = parse_source("loop: addi x1, x1, 1")
        assert isinstance(statements[0], LabelDef)
        assert statements[0].name == "loop"
        assert isinstance(statements[1], Instruction)

    def test_label_reference_stays_with_branch(self):
        """A word after a comma is an operand, not a new instruction."""
        statements = parse_source("beq x1, x2, loop\nnop")
        assert len(statements) == 2
        assert operand_texts(statements[0]) == ["x1", ",", "x2", ",", "loop"]
        assert statements[0].operands[-1].type == TokenType.MNEMONIC
        assert statements[1].mnemonic == "nop"

    def test_jump_target(self):
        """jal keeps its label operand."""
        statements = parse_source("jal ra, done")
        assert len(statements) == 1
        assert operand_texts(statements[0]) == ["ra", ",", "done"]

    def test_consecutive_mnemonics(self):
        """A mnemonic not after a comma starts a new instruction."""
        statements = parse_source("nop nop\nnop")
        assert [s.mnemonic for s in statements] == ["nop", "nop", "nop"]
        assert all(s.operands == [] for s in statements)

    def test_directive_arguments(self):
        """Directives collect arguments up to the next mnemonic."""
        statements = parse_source(".org 0x100 nop")
        assert isinstance(statements[0], Directive)
        assert statements[0].name == ".org"
        assert [t.text for t in statements[0].arguments] == ["0x100"]
        assert isinstance(statements[1], Instruction)

    def test_directive_name_lower_cased(self):
        """Directive names are normalized."""
        assert parse_source(".ORG 0")[0].name == ".org"

    def test_label_ends_operands(self):
        """A label definition always starts a new statement."""
        statements = parse_source("add x1, x2, x3 end: nop")
        assert operand_texts(statements[0]) == ["x1", ",", "x2", ",", "x3"]
        assert isinstance(statements[1], LabelDef)

    def test_statement_location(self):
        """Statements report the location of their first token."""
        stmt = parse_source("nop\n  sw x1, 4(x2)", "prog.s")[1]
        assert str(stmt.location) == "prog.s:2:3"
        assert stmt.source_line == "  sw x1, 4(x2)"

    def test_parser_class(self):
        """Parser works on an existing token list."""
        statements = Parser(tokenize("mv a0, a1")).parse()
        assert statements[0].mnemonic == "mv"

    def test_mnemonic_case_preserved(self):
        """Mnemonic text is kept as written."""
        assert parse_source("ADDI x1, x1, 1")[0].mnemonic == "ADDI"


class TestGroupingErrors:
    """Test tokens that cannot start a statement."""

    @pytest.mark.parametrize("source", ["x1", "42", ", nop", "(x2)"])
    def test_stray_operand(self, source):
        """An operand with no instruction before it is rejected."""
        with pytest.raises(OperandResolutionError) as exc_info:
            parse_source(source)
        assert "outside an instruction" in str(exc_info.value)
