import pytest

from moonlet import opcodes
from moonlet.opcodes import OpArgMask, OpCode, OpMode


@pytest.mark.parametrize("op", list(OpCode))
@pytest.mark.parametrize("a,b,c", [(0, 0, 0), (1, 2, 3), (255, 511, 511), (7, 256, 300)])
def test_abc_round_trip(op, a, b, c):
    i = opcodes.create_abc(op, a, b, c)
    assert opcodes.get_opcode(i) is op
    assert (opcodes.get_a(i), opcodes.get_b(i), opcodes.get_c(i)) == (a, b, c)
    assert 0 <= i <= 0xFFFFFFFF


@pytest.mark.parametrize("bx", [0, 1, 1000, opcodes.MAXARG_BX])
def test_abx_round_trip(bx):
    i = opcodes.create_abx(OpCode.LOADK, 12, bx)
    assert opcodes.get_opcode(i) is OpCode.LOADK
    assert opcodes.get_a(i) == 12
    assert opcodes.get_bx(i) == bx


@pytest.mark.parametrize("sbx", [-opcodes.MAXARG_SBX, -1, 0, 1, opcodes.MAXARG_SBX])
def test_asbx_round_trip(sbx):
    i = opcodes.create_asbx(OpCode.JMP, 0, sbx)
    assert opcodes.get_sbx(i) == sbx


def test_setters_change_one_field_only():
    i = opcodes.create_abc(OpCode.ADD, 3, 4, 5)
    j = opcodes.set_a(i, 9)
    assert (opcodes.get_a(j), opcodes.get_b(j), opcodes.get_c(j)) == (9, 4, 5)
    j = opcodes.set_b(j, 100)
    assert (opcodes.get_a(j), opcodes.get_b(j), opcodes.get_c(j)) == (9, 100, 5)
    j = opcodes.set_c(j, 200)
    assert (opcodes.get_a(j), opcodes.get_b(j), opcodes.get_c(j)) == (9, 100, 200)
    j = opcodes.set_opcode(j, OpCode.TAILCALL)
    assert opcodes.get_opcode(j) is OpCode.TAILCALL
    assert opcodes.get_a(j) == 9


def test_set_sbx_and_bx():
    i = opcodes.create_asbx(OpCode.FORLOOP, 2, 0)
    i = opcodes.set_sbx(i, -17)
    assert opcodes.get_sbx(i) == -17
    assert opcodes.get_a(i) == 2
    i = opcodes.set_bx(i, 42)
    assert opcodes.get_bx(i) == 42


def test_set_masks_overflowing_value():
    i = opcodes.create_abc(OpCode.MOVE, 0, 0, 0)
    j = opcodes.set_a(i, opcodes.MAXARG_A + 1)
    assert opcodes.get_a(j) == 0
    assert opcodes.get_b(j) == 0


@pytest.mark.parametrize("args", [(OpCode.MOVE, 256, 0, 0), (OpCode.MOVE, 0, 512, 0), (OpCode.MOVE, 0, 0, -1)])
def test_create_abc_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        opcodes.create_abc(*args)


def test_create_asbx_rejects_out_of_range():
    with pytest.raises(ValueError):
        opcodes.create_asbx(OpCode.JMP, 0, -opcodes.MAXARG_SBX - 1)


def test_rk_encoding():
    for k in (0, 5, opcodes.MAXINDEXRK):
        rk = opcodes.rk_as_k(k)
        assert opcodes.is_k(rk)
        assert opcodes.index_k(rk) == k
    assert not opcodes.is_k(opcodes.MAXINDEXRK)


@pytest.mark.parametrize(
    "op,name",
    [(OpCode.MOVE, "MOVE"), (OpCode.CALL, "CALL"), (OpCode.VARARG, "VARARG"), (OpCode.JMP, "JMP")],
)
def test_names_follow_encoding_order(op, name):
    assert len(opcodes.OPNAMES) == opcodes.NUM_OPCODES == 38
    i = opcodes.create_abc(op, 1, 2, 3)
    assert opcodes.OPNAMES[opcodes.get_opcode(i)] == name


def test_instruction_modes():
    assert opcodes.op_mode(OpCode.LOADK) is OpMode.ABX
    assert opcodes.op_mode(OpCode.JMP) is OpMode.ASBX
    assert opcodes.op_mode(OpCode.CLOSURE) is OpMode.ABX
    assert opcodes.op_mode(OpCode.ADD) is OpMode.ABC


def test_argument_modes():
    assert opcodes.b_mode(OpCode.MOVE) is OpArgMask.R
    assert opcodes.c_mode(OpCode.MOVE) is OpArgMask.N
    assert opcodes.c_mode(OpCode.GETTABLE) is OpArgMask.K
    assert opcodes.b_mode(OpCode.TFORLOOP) is OpArgMask.N
    assert opcodes.c_mode(OpCode.TFORLOOP) is OpArgMask.U


def test_test_and_register_flags():
    tests = {op for op in OpCode if opcodes.is_test(op)}
    assert tests == {OpCode.EQ, OpCode.LT, OpCode.LE, OpCode.TEST, OpCode.TESTSET, OpCode.TFORLOOP}
    assert not opcodes.sets_a(OpCode.SETGLOBAL)
    assert not opcodes.sets_a(OpCode.JMP)
    assert opcodes.sets_a(OpCode.MOVE)


def test_unknown_opcode_raises():
    with pytest.raises(ValueError):
        opcodes.op_mode(63)