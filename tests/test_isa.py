# =============================================================================
# test_isa.py - ISA Table Unit Tests
# =============================================================================
# Tests for the RV32I instruction and register tables.
#
# Test coverage includes:
#   - Opcode/funct3/funct7 metadata for each instruction format
#   - Pseudo-instruction expansion rules
#   - Register names, ABI aliases and case-insensitive lookup
# =============================================================================

import pytest
from rv32asm.cpu import (
    INSTRUCTION_TABLE,
    MNEMONICS,
    PSEUDO_INSTRUCTIONS,
    REGISTER_TABLE,
    InstructionFormat,
    OperandSyntax,
    is_pseudo_instruction,
    is_register,
    is_valid_instruction,
    lookup_instruction,
    lookup_register,
)


# =============================================================================
# Instruction Lookup Tests
# =============================================================================

class TestInstructionLookup:
    """Test mnemonic -> InstructionDef lookups."""

    @pytest.mark.parametrize("mnemonic,fmt,opcode,funct3,funct7", [
        ("add", InstructionFormat.R, 0x33, 0x0, 0x00),
        ("sub", InstructionFormat.R, 0x33, 0x0, 0x20),
        ("sra", InstructionFormat.R, 0x33, 0x5, 0x20),
        ("sltu", InstructionFormat.R, 0x33, 0x3, 0x00),
        ("addi", InstructionFormat.I, 0x13, 0x0, 0x00),
        ("srai", InstructionFormat.I, 0x13, 0x5, 0x20),
        ("lw", InstructionFormat.I, 0x03, 0x2, 0x00),
        ("lhu", InstructionFormat.I, 0x03, 0x5, 0x00),
        ("jalr", InstructionFormat.I, 0x67, 0x0, 0x00),
        ("sw", InstructionFormat.S, 0x23, 0x2, 0x00),
        ("bgeu", InstructionFormat.B, 0x63, 0x7, 0x00),
        ("lui", InstructionFormat.U, 0x37, 0x0, 0x00),
        ("auipc", InstructionFormat.U, 0x17, 0x0, 0x00),
        ("jal", InstructionFormat.J, 0x6F, 0x0, 0x00),
    ])
    def test_instruction_metadata(self, mnemonic, fmt, opcode, funct3, funct7):
        """Each mnemonic maps to its format and function fields."""
        info = lookup_instruction(mnemonic)
        assert info is not None
        assert info.format is fmt
        assert info.opcode == opcode
        assert info.funct3 == funct3
        assert info.funct7 == funct7

    def test_lookup_is_case_insensitive(self):
        """Mnemonics are matched regardless of case."""
        assert lookup_instruction("ADDI") == lookup_instruction("addi")
        assert is_valid_instruction("Beq")

    def test_unknown_mnemonic(self):
        """Unknown mnemonics return None rather than raising."""
        assert lookup_instruction("foobar") is None
        assert not is_valid_instruction("foobar")

    def test_operand_syntax(self):
        """I-format instructions distinguish their operand shapes."""
        assert lookup_instruction("addi").syntax is OperandSyntax.REG_REG_IMM
        assert lookup_instruction("slli").syntax is OperandSyntax.SHIFT
        assert lookup_instruction("lb").syntax is OperandSyntax.LOAD
        assert lookup_instruction("sh").syntax is OperandSyntax.STORE
        assert lookup_instruction("blt").syntax is OperandSyntax.BRANCH
        assert lookup_instruction("jal").syntax is OperandSyntax.JUMP

    def test_format_str(self):
        """Formats render as their conventional names."""
        assert str(InstructionFormat.R) == "R-type"
        assert str(InstructionFormat.PSEUDO) == "pseudo"

    def test_table_keys_are_lower_case(self):
        """Every table key is already normalized."""
        assert all(name == name.lower() for name in INSTRUCTION_TABLE)
        assert MNEMONICS == frozenset(INSTRUCTION_TABLE)


# =============================================================================
# Pseudo-Instruction Tests
# =============================================================================

class TestPseudoInstructions:
    """Test the pseudo-instruction expansion rules."""

    def test_pseudo_set(self):
        """nop, mv and not are the pseudo-instructions."""
        assert PSEUDO_INSTRUCTIONS == {"nop", "mv", "not"}
        assert is_pseudo_instruction("NOP")
        assert not is_pseudo_instruction("addi")

    def test_nop_expansion(self):
        """nop expands to addi with no source registers."""
        info = lookup_instruction("nop")
        assert info.format is InstructionFormat.PSEUDO
        assert info.expansion.base == "addi"
        assert info.expansion.immediate == 0
        assert info.expansion.registers == 0
        assert info.syntax is OperandSyntax.NONE

    def test_not_expansion(self):
        """not expands to xori with an all-ones immediate."""
        info = lookup_instruction("not")
        assert info.expansion.base == "xori"
        assert info.expansion.immediate == -1
        assert info.expansion.registers == 2
        assert info.funct3 == lookup_instruction("xori").funct3

    def test_real_instructions_have_no_expansion(self):
        """Only pseudo entries carry an expansion rule."""
        assert lookup_instruction("add").expansion is None


# =============================================================================
# Register Lookup Tests
# =============================================================================

class TestRegisterLookup:
    """Test register name -> number lookups."""

    def test_numeric_names(self):
        """x0 through x31 map to their numbers."""
        for n in range(32):
            assert lookup_register(f"x{n}") == n

    @pytest.mark.parametrize("name,number", [
        ("zero", 0), ("ra", 1), ("sp", 2), ("gp", 3), ("tp", 4),
        ("t0", 5), ("t2", 7), ("s0", 8), ("fp", 8), ("s1", 9),
        ("a0", 10), ("a7", 17), ("s2", 18), ("s11", 27), ("t3", 28), ("t6", 31),
    ])
    def test_abi_aliases(self, name, number):
        """ABI names map to the standard register numbers."""
        assert lookup_register(name) == number

    def test_case_insensitive(self):
        """Register names are matched regardless of case."""
        assert lookup_register("X5") == 5
        assert lookup_register("SP") == 2
        assert is_register("Ra")

    def test_not_registers(self):
        """Out-of-range and unknown names are not registers."""
        assert lookup_register("x32") is None
        assert lookup_register("loop") is None
        assert not is_register("addi")

    def test_table_size(self):
        """32 numeric names, 32 ABI names and the fp alias."""
        assert len(REGISTER_TABLE) == 65
