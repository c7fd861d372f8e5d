"""Virtual machine instruction set: opcodes, instruction layout and operand modes.

Instructions are 32-bit unsigned integers. The opcode occupies the low
6 bits; the remaining bits hold the operands A (8 bits), C (9 bits) and
B (9 bits), or the wider Bx (18 bits, B and C together) and Ax (26 bits,
A, B and C together). The signed sBx operand is stored in excess-K form.
"""

from __future__ import annotations

from enum import IntEnum


class OpMode(IntEnum):
    """Basic instruction formats."""

    ABC = 0
    ABX = 1
    ASBX = 2
    AX = 3


class OpArgMask(IntEnum):
    """How an instruction uses its B or C operand."""

    N = 0  # argument is not used
    U = 1  # argument is used
    R = 2  # argument is a register or a jump offset
    K = 3  # argument is a constant or register/constant


class OpCode(IntEnum):
    """Virtual machine opcodes, in encoding order."""

    MOVE = 0
    LOADK = 1
    LOADKX = 2
    LOADBOOL = 3
    LOADNIL = 4
    GETUPVAL = 5
    GETTABUP = 6
    GETTABLE = 7
    SETTABUP = 8
    SETUPVAL = 9
    SETTABLE = 10
    NEWTABLE = 11
    SELF = 12
    ADD = 13
    SUB = 14
    MUL = 15
    MOD = 16
    POW = 17
    DIV = 18
    IDIV = 19
    BAND = 20
    BOR = 21
    BXOR = 22
    SHL = 23
    SHR = 24
    UNM = 25
    BNOT = 26
    NOT = 27
    LEN = 28
    CONCAT = 29
    JMP = 30
    EQ = 31
    LT = 32
    LE = 33
    TEST = 34
    TESTSET = 35
    CALL = 36
    TAILCALL = 37
    RETURN = 38
    FORLOOP = 39
    FORPREP = 40
    TFORCALL = 41
    TFORLOOP = 42
    SETLIST = 43
    CLOSURE = 44
    VARARG = 45
    EXTRAARG = 46


NUM_OPCODES = len(OpCode)

# Operand sizes and positions.
SIZE_C = 9
SIZE_B = 9
SIZE_BX = SIZE_C + SIZE_B
SIZE_A = 8
SIZE_AX = SIZE_C + SIZE_B + SIZE_A
SIZE_OP = 6

POS_OP = 0
POS_A = POS_OP + SIZE_OP
POS_C = POS_A + SIZE_A
POS_B = POS_C + SIZE_C
POS_BX = POS_C
POS_AX = POS_A

# Operand limits.
MAXARG_BX = (1 << SIZE_BX) - 1
MAXARG_SBX = MAXARG_BX >> 1
MAXARG_AX = (1 << SIZE_AX) - 1
MAXARG_A = (1 << SIZE_A) - 1
MAXARG_B = (1 << SIZE_B) - 1
MAXARG_C = (1 << SIZE_C) - 1

# RK operands: this bit set means a constant index, clear means a register.
BITRK = 1 << (SIZE_B - 1)
MAXINDEXRK = BITRK - 1

# Invalid register that fits in 8 bits.
NO_REG = MAXARG_A

# Number of list items to accumulate before a SETLIST instruction.
LFIELDS_PER_FLUSH = 50

_INSTRUCTION_BITS = 0xFFFFFFFF


def _mask1(n: int, p: int) -> int:
    """A mask with ``n`` one bits starting at bit ``p``."""
    return ((1 << n) - 1) << p


def _getarg(i: int, pos: int, size: int) -> int:
    return (i >> pos) & _mask1(size, 0)


def _setarg(i: int, v: int, pos: int, size: int) -> int:
    mask = _mask1(size, pos)
    return ((i & ~mask) | ((v << pos) & mask)) & _INSTRUCTION_BITS


def get_opcode(i: int) -> OpCode:
    """Return the opcode of instruction ``i``; ValueError if it is unknown."""
    return OpCode(_getarg(i, POS_OP, SIZE_OP))


def set_opcode(i: int, op: int) -> int:
    """Return ``i`` with its opcode replaced by ``op``."""
    return _setarg(i, int(op), POS_OP, SIZE_OP)


def get_a(i: int) -> int:
    return _getarg(i, POS_A, SIZE_A)


def set_a(i: int, v: int) -> int:
    return _setarg(i, v, POS_A, SIZE_A)


def get_b(i: int) -> int:
    return _getarg(i, POS_B, SIZE_B)


def set_b(i: int, v: int) -> int:
    return _setarg(i, v, POS_B, SIZE_B)


def get_c(i: int) -> int:
    return _getarg(i, POS_C, SIZE_C)


def set_c(i: int, v: int) -> int:
    return _setarg(i, v, POS_C, SIZE_C)


def get_bx(i: int) -> int:
    return _getarg(i, POS_BX, SIZE_BX)


def set_bx(i: int, v: int) -> int:
    return _setarg(i, v, POS_BX, SIZE_BX)


def get_sbx(i: int) -> int:
    return get_bx(i) - MAXARG_SBX


def set_sbx(i: int, v: int) -> int:
    return set_bx(i, (v + MAXARG_SBX) & _INSTRUCTION_BITS)


def get_ax(i: int) -> int:
    return _getarg(i, POS_AX, SIZE_AX)


def set_ax(i: int, v: int) -> int:
    return _setarg(i, v, POS_AX, SIZE_AX)


def create_abc(op: int, a: int, b: int, c: int) -> int:
    """Build an instruction in the iABC format."""
    return (
        (int(op) << POS_OP) | (a << POS_A) | (b << POS_B) | (c << POS_C)
    ) & _INSTRUCTION_BITS


def create_abx(op: int, a: int, bx: int) -> int:
    """Build an instruction in the iABx format."""
    return ((int(op) << POS_OP) | (a << POS_A) | (bx << POS_BX)) & _INSTRUCTION_BITS


def create_ax(op: int, ax: int) -> int:
    """Build an instruction in the iAx format."""
    return ((int(op) << POS_OP) | (ax << POS_AX)) & _INSTRUCTION_BITS


def is_k(x: int) -> bool:
    """Whether an RK operand denotes a constant."""
    return bool(x & BITRK)


def index_k(r: int) -> int:
    """The constant index held by an RK operand."""
    return int(r) & ~BITRK


def rk_ask(x: int) -> int:
    """Encode constant index ``x`` as an RK operand."""
    return x | BITRK


def _opmode(t: int, a: int, b: OpArgMask, c: OpArgMask, m: OpMode) -> int:
    return (t << 7) | (a << 6) | (b << 4) | (c << 2) | m


_N, _U, _R, _K = OpArgMask.N, OpArgMask.U, OpArgMask.R, OpArgMask.K

# Packed properties: bits 0-1 op mode, 2-3 C mode, 4-5 B mode,
# bit 6 sets register A, bit 7 is a test (next instruction is a jump).
OPMODES: tuple[int, ...] = (
    _opmode(0, 1, _R, _N, OpMode.ABC),   # MOVE
    _opmode(0, 1, _K, _N, OpMode.ABX),   # LOADK
    _opmode(0, 1, _N, _N, OpMode.ABX),   # LOADKX
    _opmode(0, 1, _U, _U, OpMode.ABC),   # LOADBOOL
    _opmode(0, 1, _U, _N, OpMode.ABC),   # LOADNIL
    _opmode(0, 1, _U, _N, OpMode.ABC),   # GETUPVAL
    _opmode(0, 1, _U, _K, OpMode.ABC),   # GETTABUP
    _opmode(0, 1, _R, _K, OpMode.ABC),   # GETTABLE
    _opmode(0, 0, _K, _K, OpMode.ABC),   # SETTABUP
    _opmode(0, 0, _U, _N, OpMode.ABC),   # SETUPVAL
    _opmode(0, 0, _K, _K, OpMode.ABC),   # SETTABLE
    _opmode(0, 1, _U, _U, OpMode.ABC),   # NEWTABLE
    _opmode(0, 1, _R, _K, OpMode.ABC),   # SELF
    _opmode(0, 1, _K, _K, OpMode.ABC),   # ADD
    _opmode(0, 1, _K, _K, OpMode.ABC),   # SUB
    _opmode(0, 1, _K, _K, OpMode.ABC),   # MUL
    _opmode(0, 1, _K, _K, OpMode.ABC),   # MOD
    _opmode(0, 1, _K, _K, OpMode.ABC),   # POW
    _opmode(0, 1, _K, _K, OpMode.ABC),   # DIV
    _opmode(0, 1, _K, _K, OpMode.ABC),   # IDIV
    _opmode(0, 1, _K, _K, OpMode.ABC),   # BAND
    _opmode(0, 1, _K, _K, OpMode.ABC),   # BOR
    _opmode(0, 1, _K, _K, OpMode.ABC),   # BXOR
    _opmode(0, 1, _K, _K, OpMode.ABC),   # SHL
    _opmode(0, 1, _K, _K, OpMode.ABC),   # SHR
    _opmode(0, 1, _R, _N, OpMode.ABC),   # UNM
    _opmode(0, 1, _R, _N, OpMode.ABC),   # BNOT
    _opmode(0, 1, _R, _N, OpMode.ABC),   # NOT
    _opmode(0, 1, _R, _N, OpMode.ABC),   # LEN
    _opmode(0, 1, _R, _R, OpMode.ABC),   # CONCAT
    _opmode(0, 0, _R, _N, OpMode.ASBX),  # JMP
    _opmode(1, 0, _K, _K, OpMode.ABC),   # EQ
    _opmode(1, 0, _K, _K, OpMode.ABC),   # LT
    _opmode(1, 0, _K, _K, OpMode.ABC),   # LE
    _opmode(1, 0, _N, _U, OpMode.ABC),   # TEST
    _opmode(1, 1, _R, _U, OpMode.ABC),   # TESTSET
    _opmode(0, 1, _U, _U, OpMode.ABC),   # CALL
    _opmode(0, 1, _U, _U, OpMode.ABC),   # TAILCALL
    _opmode(0, 0, _U, _N, OpMode.ABC),   # RETURN
    _opmode(0, 1, _R, _N, OpMode.ASBX),  # FORLOOP
    _opmode(0, 1, _R, _N, OpMode.ASBX),  # FORPREP
    _opmode(0, 0, _N, _U, OpMode.ABC),   # TFORCALL
    _opmode(0, 1, _R, _N, OpMode.ASBX),  # TFORLOOP
    _opmode(0, 0, _U, _U, OpMode.ABC),   # SETLIST
    _opmode(0, 1, _U, _N, OpMode.ABX),   # CLOSURE
    _opmode(0, 1, _U, _N, OpMode.ABC),   # VARARG
    _opmode(0, 0, _U, _U, OpMode.AX),    # EXTRAARG
)

OPNAMES: tuple[str, ...] = tuple(op.name for op in OpCode)


def get_op_mode(op: int) -> OpMode:
    return OpMode(OPMODES[op] & 3)


def get_b_mode(op: int) -> OpArgMask:
    return OpArgMask((OPMODES[op] >> 4) & 3)


def get_c_mode(op: int) -> OpArgMask:
    return OpArgMask((OPMODES[op] >> 2) & 3)


def test_a_mode(op: int) -> bool:
    """Whether the instruction sets register A."""
    return bool(OPMODES[op] & (1 << 6))


def test_t_mode(op: int) -> bool:
    """Whether the instruction is a test (next instruction must be a jump)."""
    return bool(OPMODES[op] & (1 << 7))