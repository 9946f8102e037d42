"""Virtual machine opcodes and the 32-bit instruction encoding."""

from __future__ import annotations

from enum import IntEnum

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

MAXARG_BX = (1 << SIZE_BX) - 1
MAXARG_SBX = MAXARG_BX >> 1
MAXARG_AX = (1 << SIZE_AX) - 1
MAXARG_A = (1 << SIZE_A) - 1
MAXARG_B = (1 << SIZE_B) - 1
MAXARG_C = (1 << SIZE_C) - 1

BITRK = 1 << (SIZE_B - 1)
MAXINDEXRK = BITRK - 1
NO_REG = MAXARG_A

LFIELDS_PER_FLUSH = 50

_WORD = 0xFFFFFFFF


class OpMode(IntEnum):
    """Basic instruction format."""

    ABC = 0
    ABX = 1
    ASBX = 2
    AX = 3


class OpArgMask(IntEnum):
    """How an instruction uses its B or C argument."""

    N = 0  # not used
    U = 1  # used
    R = 2  # register or jump offset
    K = 3  # constant or register/constant


class OpCode(IntEnum):
    """Opcodes, in encoding order."""

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
    DIV = 16
    MOD = 17
    POW = 18
    UNM = 19
    NOT = 20
    LEN = 21
    CONCAT = 22
    JMP = 23
    EQ = 24
    LT = 25
    LE = 26
    TEST = 27
    TESTSET = 28
    CALL = 29
    TAILCALL = 30
    RETURN = 31
    FORLOOP = 32
    FORPREP = 33
    TFORCALL = 34
    TFORLOOP = 35
    SETLIST = 36
    CLOSURE = 37
    VARARG = 38
    EXTRAARG = 39

    def op_mode(self) -> OpMode:
        """Instruction format of this opcode."""
        return OpMode(_OPMODES[self] & 3)

    def b_mode(self) -> OpArgMask:
        """Usage of argument B."""
        return OpArgMask((_OPMODES[self] >> 4) & 3)

    def c_mode(self) -> OpArgMask:
        """Usage of argument C."""
        return OpArgMask((_OPMODES[self] >> 2) & 3)

    def sets_a(self) -> bool:
        """True if the instruction writes register A."""
        return bool(_OPMODES[self] & (1 << 6))

    def is_test(self) -> bool:
        """True if the instruction is a test (next one must be a jump)."""
        return bool(_OPMODES[self] & (1 << 7))


NUM_OPCODES = len(OpCode)


def _opmode(t: int, a: int, b: OpArgMask, c: OpArgMask, m: OpMode) -> int:
    return (t << 7) | (a << 6) | (b << 4) | (c << 2) | m


_N, _U, _R, _K = OpArgMask.N, OpArgMask.U, OpArgMask.R, OpArgMask.K
_ABC, _ABX, _ASBX, _AX = OpMode.ABC, OpMode.ABX, OpMode.ASBX, OpMode.AX

_OPMODES = {
    OpCode.MOVE: _opmode(0, 1, _R, _N, _ABC),
    OpCode.LOADK: _opmode(0, 1, _K, _N, _ABX),
    OpCode.LOADKX: _opmode(0, 1, _N, _N, _ABX),
    OpCode.LOADBOOL: _opmode(0, 1, _U, _U, _ABC),
    OpCode.LOADNIL: _opmode(0, 1, _U, _N, _ABC),
    OpCode.GETUPVAL: _opmode(0, 1, _U, _N, _ABC),
    OpCode.GETTABUP: _opmode(0, 1, _U, _K, _ABC),
    OpCode.GETTABLE: _opmode(0, 1, _R, _K, _ABC),
    OpCode.SETTABUP: _opmode(0, 0, _K, _K, _ABC),
    OpCode.SETUPVAL: _opmode(0, 0, _U, _N, _ABC),
    OpCode.SETTABLE: _opmode(0, 0, _K, _K, _ABC),
    OpCode.NEWTABLE: _opmode(0, 1, _U, _U, _ABC),
    OpCode.SELF: _opmode(0, 1, _R, _K, _ABC),
    OpCode.ADD: _opmode(0, 1, _K, _K, _ABC),
    OpCode.SUB: _opmode(0, 1, _K, _K, _ABC),
    OpCode.MUL: _opmode(0, 1, _K, _K, _ABC),
    OpCode.DIV: _opmode(0, 1, _K, _K, _ABC),
    OpCode.MOD: _opmode(0, 1, _K, _K, _ABC),
    OpCode.POW: _opmode(0, 1, _K, _K, _ABC),
    OpCode.UNM: _opmode(0, 1, _R, _N, _ABC),
    OpCode.NOT: _opmode(0, 1, _R, _N, _ABC),
    OpCode.LEN: _opmode(0, 1, _R, _N, _ABC),
    OpCode.CONCAT: _opmode(0, 1, _R, _R, _ABC),
    OpCode.JMP: _opmode(0, 0, _R, _N, _ASBX),
    OpCode.EQ: _opmode(1, 0, _K, _K, _ABC),
    OpCode.LT: _opmode(1, 0, _K, _K, _ABC),
    OpCode.LE: _opmode(1, 0, _K, _K, _ABC),
    OpCode.TEST: _opmode(1, 0, _N, _U, _ABC),
    OpCode.TESTSET: _opmode(1, 1, _R, _U, _ABC),
    OpCode.CALL: _opmode(0, 1, _U, _U, _ABC),
    OpCode.TAILCALL: _opmode(0, 1, _U, _U, _ABC),
    OpCode.RETURN: _opmode(0, 0, _U, _N, _ABC),
    OpCode.FORLOOP: _opmode(0, 1, _R, _N, _ASBX),
    OpCode.FORPREP: _opmode(0, 1, _R, _N, _ASBX),
    OpCode.TFORCALL: _opmode(0, 0, _N, _U, _ABC),
    OpCode.TFORLOOP: _opmode(0, 1, _R, _N, _ASBX),
    OpCode.SETLIST: _opmode(0, 0, _U, _U, _ABC),
    OpCode.CLOSURE: _opmode(0, 1, _U, _N, _ABX),
    OpCode.VARARG: _opmode(0, 1, _U, _N, _ABC),
    OpCode.EXTRAARG: _opmode(0, 0, _U, _U, _AX),
}


def _mask(size: int, pos: int) -> int:
    return ((1 << size) - 1) << pos


def _getarg(word: int, pos: int, size: int) -> int:
    return (word >> pos) & ((1 << size) - 1)


def _setarg(word: int, value: int, pos: int, size: int) -> int:
    m = _mask(size, pos)
    return (word & ~m & _WORD) | (((value & _WORD) << pos) & m)


class Instruction(int):
    """An immutable 32-bit instruction word with field accessors."""

    def __new__(cls, value: int = 0) -> "Instruction":
        return super().__new__(cls, int(value) & _WORD)

    @property
    def opcode(self) -> OpCode:
        return OpCode(_getarg(self, POS_OP, SIZE_OP))

    @property
    def a(self) -> int:
        return _getarg(self, POS_A, SIZE_A)

    @property
    def b(self) -> int:
        return _getarg(self, POS_B, SIZE_B)

    @property
    def c(self) -> int:
        return _getarg(self, POS_C, SIZE_C)

    @property
    def bx(self) -> int:
        return _getarg(self, POS_BX, SIZE_BX)

    @property
    def sbx(self) -> int:
        return self.bx - MAXARG_SBX

    @property
    def ax(self) -> int:
        return _getarg(self, POS_AX, SIZE_AX)

    def with_opcode(self, op: int) -> "Instruction":
        return Instruction(_setarg(self, op, POS_OP, SIZE_OP))

    def with_a(self, value: int) -> "Instruction":
        return Instruction(_setarg(self, value, POS_A, SIZE_A))

    def with_b(self, value: int) -> "Instruction":
        return Instruction(_setarg(self, value, POS_B, SIZE_B))

    def with_c(self, value: int) -> "Instruction":
        return Instruction(_setarg(self, value, POS_C, SIZE_C))

    def with_bx(self, value: int) -> "Instruction":
        return Instruction(_setarg(self, value, POS_BX, SIZE_BX))

    def with_sbx(self, value: int) -> "Instruction":
        return self.with_bx(value + MAXARG_SBX)

    def with_ax(self, value: int) -> "Instruction":
        return Instruction(_setarg(self, value, POS_AX, SIZE_AX))

    def __repr__(self) -> str:
        return f"Instruction(0x{int(self):08x})"


def create_abc(op: int, a: int, b: int, c: int) -> Instruction:
    """Encode an instruction in iABC format."""
    return Instruction((op << POS_OP) | (a << POS_A) | (b << POS_B) | (c << POS_C))


def create_abx(op: int, a: int, bx: int) -> Instruction:
    """Encode an instruction in iABx format."""
    return Instruction((op << POS_OP) | (a << POS_A) | (bx << POS_BX))


def create_asbx(op: int, a: int, sbx: int) -> Instruction:
    """Encode an instruction in iAsBx format (signed Bx in excess-K)."""
    return create_abx(op, a, sbx + MAXARG_SBX)


def create_ax(op: int, ax: int) -> Instruction:
    """Encode an instruction in iAx format."""
    return Instruction((op << POS_OP) | (ax << POS_AX))


def is_k(x: int) -> bool:
    """True if an RK operand denotes a constant."""
    return bool(x & BITRK)


def index_k(r: int) -> int:
    """Constant index held in an RK operand."""
    return int(r) & ~BITRK


def rk_as_k(x: int) -> int:
    """Encode a constant index as an RK operand."""
    return x | BITRK