import pytest
from hypothesis import given
from hypothesis import strategies as st

from moonkit import opcodes as oc
from moonkit.opcodes import OpArgMask, OpCode, OpMode

ops = st.sampled_from(list(OpCode))
a_vals = st.integers(0, oc.MAXARG_A)
b_vals = st.integers(0, oc.MAXARG_B)
c_vals = st.integers(0, oc.MAXARG_C)
bx_vals = st.integers(0, oc.MAXARG_BX)
ax_vals = st.integers(0, oc.MAXARG_AX)


@given(ops, a_vals, b_vals, c_vals)
def test_abc_round_trip(op, a, b, c):
    i = oc.create_abc(op, a, b, c)
    assert oc.get_opcode(i) == op
    assert oc.get_a(i) == a
    assert oc.get_b(i) == b
    assert oc.get_c(i) == c
    assert 0 <= i <= 0xFFFFFFFF


@given(ops, a_vals, bx_vals)
def test_abx_round_trip(op, a, bx):
    i = oc.create_abx(op, a, bx)
    assert oc.get_opcode(i) == op
    assert oc.get_a(i) == a
    assert oc.get_bx(i) == bx


@given(ops, ax_vals)
def test_ax_round_trip(op, ax):
    i = oc.create_ax(op, ax)
    assert oc.get_opcode(i) == op
    assert oc.get_ax(i) == ax


@given(ops, a_vals, b_vals, c_vals, a_vals)
def test_set_a_keeps_other_fields(op, a, b, c, new_a):
    i = oc.set_a(oc.create_abc(op, a, b, c), new_a)
    assert (oc.get_opcode(i), oc.get_a(i), oc.get_b(i), oc.get_c(i)) == (op, new_a, b, c)


@given(ops, a_vals, b_vals, c_vals, b_vals, c_vals)
def test_set_b_and_c(op, a, b, c, nb, nc):
    i = oc.create_abc(op, a, b, c)
    i = oc.set_c(oc.set_b(i, nb), nc)
    assert (oc.get_opcode(i), oc.get_a(i), oc.get_b(i), oc.get_c(i)) == (op, a, nb, nc)


@given(ops, ops, a_vals, b_vals, c_vals)
def test_set_opcode(op, new_op, a, b, c):
    i = oc.set_opcode(oc.create_abc(op, a, b, c), new_op)
    assert oc.get_opcode(i) == new_op
    assert (oc.get_a(i), oc.get_b(i), oc.get_c(i)) == (a, b, c)


@given(st.integers(-oc.MAXARG_SBX, oc.MAXARG_SBX + 1), a_vals)
def test_sbx_round_trip(sbx, a):
    i = oc.set_sbx(oc.create_abx(OpCode.JMP, a, 0), sbx)
    assert oc.get_sbx(i) == sbx
    assert oc.get_a(i) == a
    assert oc.get_opcode(i) == OpCode.JMP


@given(ops, ax_vals, ax_vals)
def test_set_ax(op, ax, new_ax):
    i = oc.set_ax(oc.create_ax(op, ax), new_ax)
    assert oc.get_ax(i) == new_ax
    assert oc.get_opcode(i) == op


@given(bx_vals, bx_vals)
def test_set_bx(bx, new_bx):
    i = oc.set_bx(oc.create_abx(OpCode.LOADK, 3, bx), new_bx)
    assert oc.get_bx(i) == new_bx
    assert oc.get_a(i) == 3


def test_zero_sbx_is_stored_as_excess():
    i = oc.set_sbx(0, 0)
    assert oc.get_bx(i) == oc.MAXARG_SBX


@given(st.integers(0, oc.MAXINDEXRK))
def test_rk_round_trip(x):
    rk = oc.rk_ask(x)
    assert oc.is_k(rk)
    assert oc.index_k(rk) == x
    assert not oc.is_k(x)


def test_unknown_opcode_raises():
    i = oc.create_abc(len(OpCode), 0, 0, 0)
    with pytest.raises(ValueError):
        oc.get_opcode(i)


def test_opcode_numbering():
    first = oc.get_opcode(oc.create_abc(OpCode.MOVE, 0, 0, 0))
    last = oc.get_opcode(oc.create_ax(OpCode.EXTRAARG, 0))
    assert first == 0
    assert last == oc.NUM_OPCODES - 1
    assert oc.OPNAMES[first] == "MOVE"
    assert oc.OPNAMES[last] == "EXTRAARG"
    assert len([oc.get_op_mode(op) for op in OpCode]) == len(oc.OPMODES) == oc.NUM_OPCODES


def test_modes_from_table():
    assert oc.get_op_mode(OpCode.JMP) == OpMode.ASBX
    assert oc.get_op_mode(OpCode.LOADK) == OpMode.ABX
    assert oc.get_op_mode(OpCode.EXTRAARG) == OpMode.AX
    assert oc.get_op_mode(OpCode.ADD) == OpMode.ABC
    assert oc.get_b_mode(OpCode.LOADK) == OpArgMask.K
    assert oc.get_c_mode(OpCode.LOADK) == OpArgMask.N
    assert oc.get_b_mode(OpCode.MOVE) == OpArgMask.R
    assert oc.get_c_mode(OpCode.TEST) == OpArgMask.U


def test_a_and_t_modes():
    assert oc.test_t_mode(OpCode.EQ)
    assert oc.test_t_mode(OpCode.TESTSET)
    assert not oc.test_t_mode(OpCode.ADD)
    assert oc.test_a_mode(OpCode.MOVE)
    assert not oc.test_a_mode(OpCode.SETTABUP)
    assert not oc.test_a_mode(OpCode.JMP)


def test_test_ops_are_exactly_the_comparisons():
    tests = {op for op in OpCode if oc.test_t_mode(op)}
    assert tests == {OpCode.EQ, OpCode.LT, OpCode.LE, OpCode.TEST, OpCode.TESTSET}