"""Instruction set of the virtual machine: opcodes, their argument modes
and the packing of 32-bit instructions.

Every instruction keeps its opcode in the low 6 bits, followed by the
``A`` field (8 bits), then ``C`` (9 bits) and ``B`` (9 bits). ``Bx``
joins ``B`` and ``C`` into 18 bits, and ``sBx`` is ``Bx`` in excess-K
notation.
"""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "OpCode",
    "OpMode",
    "OpArgMask",
    "SIZE_C",
    "SIZE_B",
    "SIZE_BX",
    "SIZE_A",
    "SIZE_OP",
    "POS_OP",
    "POS_A",
    "POS_C",
    "POS_B",
    "POS_BX",
    "MAXARG_A",
    "MAXARG_B",
    "MAXARG_C",
    "MAXARG_BX",
    "MAXARG_SBX",
    "BITRK",
    "MAXINDEXRK",
    "NO_REG",
    "NUM_OPCODES",
    "OPNAMES",
    "LFIELDS_PER_FLUSH",
    "create_abc",
    "create_abx",
    "create_asbx",
    "get_opcode",
    "get_a",
    "get_b",
    "get_c",
    "get_bx",
    "get_sbx",
    "set_opcode",
    "set_a",
    "set_b",
    "set_c",
    "set_bx",
    "set_sbx",
    "is_k",
    "index_k",
    "rk_as_k",
    "op_mode",
    "b_mode",
    "c_mode",
    "sets_a",
    "is_test",
]


class OpMode(IntEnum):
    """Basic instruction formats."""

    ABC = 0
    ABX = 1
    ASBX = 2


class OpArgMask(IntEnum):
    """How an instruction uses its B or C argument."""

    N = 0  # not used
    U = 1  # used
    R = 2  # register or jump offset
    K = 3  # constant or register/constant


class OpCode(IntEnum):
    """Virtual machine opcodes, in encoding order."""

    MOVE = 0
    LOADK = 1
    LOADBOOL = 2
    LOADNIL = 3
    GETUPVAL = 4
    GETGLOBAL = 5
    GETTABLE = 6
    SETGLOBAL = 7
    SETUPVAL = 8
    SETTABLE = 9
    NEWTABLE = 10
    SELF = 11
    ADD = 12
    SUB = 13
    MUL = 14
    DIV = 15
    MOD = 16
    POW = 17
    UNM = 18
    NOT = 19
    LEN = 20
    CONCAT = 21
    JMP = 22
    EQ = 23
    LT = 24
    LE = 25
    TEST = 26
    TESTSET = 27
    CALL = 28
    TAILCALL = 29
    RETURN = 30
    FORLOOP = 31
    FORPREP = 32
    TFORLOOP = 33
    SETLIST = 34
    CLOSE = 35
    CLOSURE = 36
    VARARG = 37


SIZE_C = 9
SIZE_B = 9
SIZE_BX = SIZE_C + SIZE_B
SIZE_A = 8
SIZE_OP = 6

POS_OP = 0
POS_A = POS_OP + SIZE_OP
POS_C = POS_A + SIZE_A
POS_B = POS_C + SIZE_C
POS_BX = POS_C

MAXARG_BX = (1 << SIZE_BX) - 1
MAXARG_SBX = MAXARG_BX >> 1
MAXARG_A = (1 << SIZE_A) - 1
MAXARG_B = (1 << SIZE_B) - 1
MAXARG_C = (1 << SIZE_C) - 1

BITRK = 1 << (SIZE_B - 1)
MAXINDEXRK = BITRK - 1
NO_REG = MAXARG_A

NUM_OPCODES = len(OpCode)
OPNAMES: tuple[str, ...] = tuple(op.name for op in OpCode)

LFIELDS_PER_FLUSH = 50

_INSTRUCTION_MASK = 0xFFFFFFFF


def _pack_mode(t: int, a: int, b: OpArgMask, c: OpArgMask, m: OpMode) -> int:
    return (t << 7) | (a << 6) | (b << 4) | (c << 2) | m


_N, _U, _R, _K = OpArgMask.N, OpArgMask.U, OpArgMask.R, OpArgMask.K
_ABC, _ABX, _ASBX = OpMode.ABC, OpMode.ABX, OpMode.ASBX

_OPMODES: dict[OpCode, int] = {
    OpCode.MOVE: _pack_mode(0, 1, _R, _N, _ABC),
    OpCode.LOADK: _pack_mode(0, 1, _K, _N, _ABX),
    OpCode.LOADBOOL: _pack_mode(0, 1, _U, _U, _ABC),
    OpCode.LOADNIL: _pack_mode(0, 1, _R, _N, _ABC),
    OpCode.GETUPVAL: _pack_mode(0, 1, _U, _N, _ABC),
    OpCode.GETGLOBAL: _pack_mode(0, 1, _K, _N, _ABX),
    OpCode.GETTABLE: _pack_mode(0, 1, _R, _K, _ABC),
    OpCode.SETGLOBAL: _pack_mode(0, 0, _K, _N, _ABX),
    OpCode.SETUPVAL: _pack_mode(0, 0, _U, _N, _ABC),
    OpCode.SETTABLE: _pack_mode(0, 0, _K, _K, _ABC),
    OpCode.NEWTABLE: _pack_mode(0, 1, _U, _U, _ABC),
    OpCode.SELF: _pack_mode(0, 1, _R, _K, _ABC),
    OpCode.ADD: _pack_mode(0, 1, _K, _K, _ABC),
    OpCode.SUB: _pack_mode(0, 1, _K, _K, _ABC),
    OpCode.MUL: _pack_mode(0, 1, _K, _K, _ABC),
    OpCode.DIV: _pack_mode(0, 1, _K, _K, _ABC),
    OpCode.MOD: _pack_mode(0, 1, _K, _K, _ABC),
    OpCode.POW: _pack_mode(0, 1, _K, _K, _ABC),
    OpCode.UNM: _pack_mode(0, 1, _R, _N, _ABC),
    OpCode.NOT: _pack_mode(0, 1, _R, _N, _ABC),
    OpCode.LEN: _pack_mode(0, 1, _R, _N, _ABC),
    OpCode.CONCAT: _pack_mode(0, 1, _R, _R, _ABC),
    OpCode.JMP: _pack_mode(0, 0, _R, _N, _ASBX),
    OpCode.EQ: _pack_mode(1, 0, _K, _K, _ABC),
    OpCode.LT: _pack_mode(1, 0, _K, _K, _ABC),
    OpCode.LE: _pack_mode(1, 0, _K, _K, _ABC),
    OpCode.TEST: _pack_mode(1, 1, _R, _U, _ABC),
    OpCode.TESTSET: _pack_mode(1, 1, _R, _U, _ABC),
    OpCode.CALL: _pack_mode(0, 1, _U, _U, _ABC),
    OpCode.TAILCALL: _pack_mode(0, 1, _U, _U, _ABC),
    OpCode.RETURN: _pack_mode(0, 0, _U, _N, _ABC),
    OpCode.FORLOOP: _pack_mode(0, 1, _R, _N, _ASBX),
    OpCode.FORPREP: _pack_mode(0, 1, _R, _N, _ASBX),
    OpCode.TFORLOOP: _pack_mode(1, 0, _N, _U, _ABC),
    OpCode.SETLIST: _pack_mode(0, 0, _U, _U, _ABC),
    OpCode.CLOSE: _pack_mode(0, 0, _N, _N, _ABC),
    OpCode.CLOSURE: _pack_mode(0, 1, _U, _N, _ABX),
    OpCode.VARARG: _pack_mode(0, 1, _U, _N, _ABC),
}


def _mask1(n: int, p: int) -> int:
    return ((1 << n) - 1) << p


def _check_field(name: str, value: int, maximum: int) -> int:
    if not 0 <= value <= maximum:
        raise ValueError(f"argument {name}={value} out of range 0..{maximum}")
    return value


def _get(i: int, size: int, pos: int) -> int:
    return (i >> pos) & _mask1(size, 0)


def _set(i: int, value: int, size: int, pos: int) -> int:
    return ((i & ~_mask1(size, pos)) | ((value << pos) & _mask1(size, pos))) & _INSTRUCTION_MASK


def create_abc(o: int, a: int, b: int, c: int) -> int:
    """Encode an instruction in the iABC format."""
    _check_field("op", o, (1 << SIZE_OP) - 1)
    _check_field("A", a, MAXARG_A)
    _check_field("B", b, MAXARG_B)
    _check_field("C", c, MAXARG_C)
    return (o << POS_OP) | (a << POS_A) | (b << POS_B) | (c << POS_C)


def create_abx(o: int, a: int, bx: int) -> int:
    """Encode an instruction in the iABx format."""
    _check_field("op", o, (1 << SIZE_OP) - 1)
    _check_field("A", a, MAXARG_A)
    _check_field("Bx", bx, MAXARG_BX)
    return (o << POS_OP) | (a << POS_A) | (bx << POS_BX)


def create_asbx(o: int, a: int, sbx: int) -> int:
    """Encode an instruction in the iAsBx format (signed Bx)."""
    if not -MAXARG_SBX <= sbx <= MAXARG_BX - MAXARG_SBX:
        raise ValueError(f"argument sBx={sbx} out of range")
    return create_abx(o, a, sbx + MAXARG_SBX)


def get_opcode(i: int) -> OpCode:
    return OpCode(_get(i, SIZE_OP, POS_OP))


def get_a(i: int) -> int:
    return _get(i, SIZE_A, POS_A)


def get_b(i: int) -> int:
    return _get(i, SIZE_B, POS_B)


def get_c(i: int) -> int:
    return _get(i, SIZE_C, POS_C)


def get_bx(i: int) -> int:
    return _get(i, SIZE_BX, POS_BX)


def get_sbx(i: int) -> int:
    return get_bx(i) - MAXARG_SBX


def set_opcode(i: int, o: int) -> int:
    """Return ``i`` with its opcode replaced by ``o``."""
    return _set(i, o, SIZE_OP, POS_OP)


def set_a(i: int, a: int) -> int:
    return _set(i, a, SIZE_A, POS_A)


def set_b(i: int, b: int) -> int:
    return _set(i, b, SIZE_B, POS_B)


def set_c(i: int, c: int) -> int:
    return _set(i, c, SIZE_C, POS_C)


def set_bx(i: int, bx: int) -> int:
    return _set(i, bx, SIZE_BX, POS_BX)


def set_sbx(i: int, sbx: int) -> int:
    return set_bx(i, (sbx + MAXARG_SBX) & _INSTRUCTION_MASK)


def is_k(x: int) -> bool:
    """True if an RK operand refers to a constant."""
    return bool(x & BITRK)


def index_k(r: int) -> int:
    """Constant index held in an RK operand."""
    return r & ~BITRK


def rk_as_k(x: int) -> int:
    """Encode a constant index as an RK operand."""
    return x | BITRK


def op_mode(op: int) -> OpMode:
    return OpMode(_OPMODES[OpCode(op)] & 3)


def b_mode(op: int) -> OpArgMask:
    return OpArgMask((_OPMODES[OpCode(op)] >> 4) & 3)


def c_mode(op: int) -> OpArgMask:
    return OpArgMask((_OPMODES[OpCode(op)] >> 2) & 3)


def sets_a(op: int) -> bool:
    """True if the instruction writes register A."""
    return bool(_OPMODES[OpCode(op)] & (1 << 6))


def is_test(op: int) -> bool:
    """True if the instruction is a test (the next one is a jump)."""
    return bool(_OPMODES[OpCode(op)] & (1 << 7))