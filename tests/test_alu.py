"""Tests for ALU operations (8xxx)."""

import pytest
from chip8vm import execute
from conftest import set_registers


class TestBasicALU:
    """Test basic ALU operations."""

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
        assert state.V[15] == 0

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

    def test_logic_leaves_flag_alone(self, fresh_state):
        """8XY1..8XY3 never touch VF."""
        for op in (0x1, 0x2, 0x3):
            state = set_registers(fresh_state, V1=0xAA, V2=0x55, VF=0x07)
            state = execute(state, 0x8120 | op)
            assert state.V[15] == 0x07, f"8XY{op:X} changed VF"


class TestALUArithmetic:
    """Test arithmetic ALU operations and their flag quirks."""

    @pytest.mark.parametrize("x, y", [(1, 2), (0, 14), (7, 3)])
    def test_add_with_carry(self, fresh_state, x, y):
        """8XY4 - 200 + 100 wraps to 44 and sets the carry."""
        state = fresh_state.replace(V=fresh_state.V.at[x].set(200).at[y].set(100))

        state = execute(state, 0x8004 | (x << 8) | (y << 4))

        assert state.V[x] == 44
        assert state.V[15] == 1

    @pytest.mark.parametrize("previous_flag", [0, 1, 0x42])
    def test_add_without_carry_keeps_flag(self, fresh_state, previous_flag):
        """8XY4 - 10 + 20 = 30 and VF keeps whatever it held."""
        state = set_registers(fresh_state, V1=10, V2=20, VF=previous_flag)

        state = execute(state, 0x8124)

        assert state.V[1] == 30
        assert state.V[15] == previous_flag

    def test_add_exactly_255_is_not_carry(self, fresh_state):
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F, VF=0)

        state = execute(state, 0x8124)

        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    def test_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - 5 - 3 = 2, VF = 1."""
        state = set_registers(fresh_state, V1=5, V2=3)

        state = execute(state, 0x8125)

        assert state.V[1] == 2
        assert state.V[15] == 1

    @pytest.mark.parametrize("previous_flag", [0, 1])
    def test_sub_xy_with_borrow_keeps_flag(self, fresh_state, previous_flag):
        """8XY5 - 3 - 5 wraps to 254, VF is not cleared."""
        state = set_registers(fresh_state, V1=3, V2=5, VF=previous_flag)

        state = execute(state, 0x8125)

        assert state.V[1] == 254
        assert state.V[15] == previous_flag

    def test_sub_xy_equal_keeps_flag(self, fresh_state):
        """8XY5 - VX == VY is not VX > VY."""
        state = set_registers(fresh_state, V3=0x30, V4=0x30, VF=0)

        state = execute(state, 0x8345)

        assert state.V[3] == 0
        assert state.V[15] == 0

    def test_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - VX = VY - VX, VF = 1 when VX < VY."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20
        assert state.V[15] == 1

    def test_sub_yx_with_borrow_keeps_flag(self, fresh_state):
        state = set_registers(fresh_state, V1=0x30, V2=0x10, VF=0)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0  # 16 - 48 = -32 -> 224
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations, which act on VX and ignore VY."""

    def test_shift_right_even(self, fresh_state):
        state = set_registers(fresh_state, V1=0x04, V2=0xFF)

        state = execute(state, 0x8126)

        assert state.V[1] == 0x02
        assert state.V[2] == 0xFF
        assert state.V[15] == 0

    def test_shift_right_odd(self, fresh_state):
        state = set_registers(fresh_state, V3=0x05, V4=0x02)

        state = execute(state, 0x8346)

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_right_uses_vx_not_vy(self, fresh_state):
        state = set_registers(fresh_state, V1=0x08, V2=0x03)

        state = execute(state, 0x8126)

        assert state.V[1] == 0x04  # 8 >> 1, V2 ignored
        assert state.V[15] == 0

    def test_shift_left_high_bit_flag_is_not_normalized(self, fresh_state):
        """8XYE - VF receives VX & 0x80 as is."""
        state = set_registers(fresh_state, V3=0x81, V4=0x01)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x02  # 0x102 truncated
        assert state.V[15] == 0x80

    def test_shift_left_clear_high_bit(self, fresh_state):
        state = set_registers(fresh_state, V3=0x41, VF=1)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_undefined_operations(self, fresh_state):
        """Undefined 8XYN forms change nothing."""
        for op in [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]:
            state = set_registers(fresh_state, V1=0x42, V2=0x99, VF=0x05)

            state = execute(state, 0x8120 | op)

            assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
            assert state.V[2] == 0x99, f"Undefined op {op:X} changed VY"
            assert state.V[15] == 0x05, f"Undefined op {op:X} changed VF"

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = set_registers(fresh_state, V5=0xAA)

        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = set_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_add_with_flag_as_source(self, fresh_state):
        """VF as VY is read before it could change; no carry leaves it alone."""
        state = set_registers(fresh_state, V1=0x10, VF=0x42)

        state = execute(state, 0x81F4)  # V1 += VF

        assert state.V[1] == 0x52
        assert state.V[15] == 0x42

    def test_add_into_flag_register(self, fresh_state):
        """With X = F the sum overwrites the carry."""
        state = set_registers(fresh_state, VF=0xFF, V1=0x02)

        state = execute(state, 0x8F14)  # VF += V1

        assert state.V[15] == 0x01

    def test_sub_into_flag_register_sees_new_flag(self, fresh_state):
        """With X = F the flag is written first and then used as VX."""
        state = set_registers(fresh_state, VF=0x05, V1=0x03)

        state = execute(state, 0x8F15)  # VF > V1 so VF = 1, then VF = 1 - 3

        assert state.V[15] == 0xFE
