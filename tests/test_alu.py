"""Tests for ALU operations (8xxx)."""

import pytest
from chipcore import execute, create_state, Quirks
from conftest import set_registers


class TestBasicALU:
    """Test register move and logic operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    @pytest.mark.parametrize("instruction", [0x8120, 0x8121, 0x8122, 0x8123])
    def test_logic_ops_leave_vf_alone(self, fresh_state, instruction):
        """8XY0-8XY3 never write VF."""
        state = set_registers(fresh_state, V1=0xAA, V2=0x55, VF=0x7E)

        state = execute(state, instruction)

        assert state.V[15] == 0x7E

    def test_logic_op_into_vf(self, fresh_state):
        """8FY1 stores the OR result in VF since no flag is written afterwards."""
        state = set_registers(fresh_state, VF=0xF0, V1=0x0F)

        state = execute(state, 0x8F11)  # VF |= V1

        assert state.V[15] == 0xFF


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = set_registers(fresh_state, V1=0x10, V2=0x20)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x01)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1

    @pytest.mark.parametrize("vx, vy", [(250, 10), (10, 250)])
    def test_alu_add_carry_is_commutative(self, fresh_state, vx, vy):
        """8XY4 - 250 + 10 and 10 + 250 both give VF=1, VX=4."""
        state = set_registers(fresh_state, V1=vx, V2=vy)

        state = execute(state, 0x8124)

        assert state.V[1] == 4
        assert state.V[15] == 1

    def test_alu_add_exactly_255(self, fresh_state):
        """8XY4 - A sum of exactly 255 does not carry."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8124)

        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1  # No borrow (VX >= VY)

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = set_registers(fresh_state, V3=0x10, V4=0x30)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0  # Borrow (VX < VY)

    def test_alu_sub_xy_equal_operands(self, fresh_state):
        """8XY5 - Equal operands never borrow."""
        state = set_registers(fresh_state, V1=5, V2=5)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 1

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1  # No borrow (VY >= VX)

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, with borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0

    def test_alu_sub_yx_equal_operands(self, fresh_state):
        """8XY7 - Equal operands never borrow."""
        state = set_registers(fresh_state, V1=9, V2=9)

        state = execute(state, 0x8127)

        assert state.V[1] == 0
        assert state.V[15] == 1


class TestALUShifts:
    """Test shift operations."""

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = set_registers(fresh_state, V1=0x04, V2=0xFF)  # V2 ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02
        assert state.V[15] == 0  # LSB was 0

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - Shift right, odd number."""
        state = set_registers(fresh_state, V3=0x05, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1  # LSB was 1

    @pytest.mark.parametrize("value, expected, flag", [(0, 0, 0), (255, 127, 1)])
    def test_shift_right_extremes(self, fresh_state, value, expected, flag):
        """8XY6 - 0 shifts to 0 with VF=0, 255 to 127 with VF=1."""
        state = set_registers(fresh_state, V1=value)

        state = execute(state, 0x8106)

        assert state.V[1] == expected
        assert state.V[15] == flag

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - Shift left with overflow."""
        state = set_registers(fresh_state, V3=0x81, V4=0xFF)  # 10000001

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02  # 129 << 1 = 258 → 2
        assert state.V[15] == 1  # MSB was 1

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - Shift left without overflow."""
        state = set_registers(fresh_state, V3=0x41)

        state = execute(state, 0x830E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    def test_shift_uses_vy_quirk(self):
        """8XY6/8XYE shift VY into VX with the shift_uses_vy quirk."""
        state = create_state(quirks=Quirks(shift_uses_vy=True))
        state = set_registers(state, V1=0x08, V2=0x03)

        shifted_right = execute(state, 0x8126)
        shifted_left = execute(state, 0x812E)

        assert shifted_right.V[1] == 0x01  # 3 >> 1
        assert shifted_right.V[15] == 1
        assert shifted_left.V[1] == 0x06  # 3 << 1
        assert shifted_left.V[15] == 0


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    @pytest.mark.parametrize("op", [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF])
    def test_alu_undefined_operations(self, fresh_state, op):
        """Unmapped 8XYN selectors change nothing."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99, VF=0x33)

        state = execute(state, 0x8120 | op)

        assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
        assert state.V[15] == 0x33, f"Undefined op {op:X} changed VF"

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = set_registers(fresh_state, V5=0xAA)

        state = execute(state, 0x8553)  # V5 ^= V5
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = set_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_as_source(self, fresh_state):
        """VF as the VY operand is read before being overwritten by the flag."""
        state = set_registers(fresh_state, VF=0x42, V1=0x10)

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52
        assert state.V[15] == 0

    def test_vf_as_destination_keeps_flag(self, fresh_state):
        """With X=F the flag is written last and wins over the result."""
        state = set_registers(fresh_state, VF=0x10, V1=0xF5)

        state = execute(state, 0x8F14)  # VF += V1 → 0x105

        assert state.V[15] == 1

    def test_logic_resets_vf_quirk(self):
        """8XY1-8XY3 clear VF with the logic_resets_vf quirk."""
        state = create_state(quirks=Quirks(logic_resets_vf=True))
        state = set_registers(state, V1=0xF0, V2=0x0F, VF=0x01)

        for instruction in (0x8121, 0x8122, 0x8123):
            result = execute(state, instruction)
            assert result.V[15] == 0, f"{instruction:04X} did not reset VF"
