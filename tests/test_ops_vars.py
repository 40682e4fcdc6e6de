import struct
from types import SimpleNamespace

import pytest

from saucevm.objects import ObjectPool
from saucevm.ops_vars import register
from saucevm.program import ClassData, ClassTable
from saucevm.stack import Stack
from saucevm.types import Var, VarType, VMError

OPS: dict = {}
register(OPS)


def u32(value):
    return struct.pack("<I", value & 0xFFFFFFFF)


def ref(index, count):
    return index | (count << 16)


class FakeMachine:
    def __init__(self, code=b"", local_vars=(), statics=()):
        self.stack = Stack()
        self.objects = ObjectPool(8)
        self.classes = ClassTable()
        self.script = SimpleNamespace(
            code_data=bytearray(code),
            code_offset=0,
            obj=None,
            class_data=ClassData(static_vars=list(statics)),
            local_vars=[Var(VarType.OBJECT, 0), *local_vars],
        )

    def with_object(self, members):
        obj = self.objects.new(0, members)
        self.script.obj = obj
        return obj

    def local_var(self, num):
        if num < 0 or num >= len(self.script.local_vars):
            raise VMError(f"Local variable {num} out of range")
        return self.script.local_vars[num]

    def member_var(self, obj, num):
        return obj.member(num)

    def static_var(self, data, num):
        return data.static_var(num)


def test_register_installs_variable_opcodes():
    assert set(OPS) == {
        0x06, 0x07, 0x08, 0x09, 0x0A, 0x0B, 0x0C,
        0x0E, 0x0F, 0x10, 0x11, 0x12, 0x8C,
    }


def test_push_int8_pushes_unsigned_byte():
    m = FakeMachine(bytes([0xFF]))
    OPS[0x06](m)
    assert m.stack.pop_var() == Var(VarType.INT32, 0xFF)
    assert m.script.code_offset == 1


def test_push_int32_reads_signed_value():
    m = FakeMachine(struct.pack("<i", -7))
    OPS[0x07](m)
    assert m.stack.pop_var() == Var(VarType.INT32, -7)
    assert m.script.code_offset == 4


def test_push_float_keeps_bits():
    m = FakeMachine(struct.pack("<f", 2.5))
    OPS[0x8C](m)
    assert m.stack.pop_float() == 2.5


def test_truncated_code_raises():
    m = FakeMachine(b"\x01")
    with pytest.raises(VMError):
        OPS[0x07](m)


def test_push_local_run_pushes_in_order():
    m = FakeMachine(u32(ref(1, 2)), [Var(VarType.INT32, 10), Var(VarType.INT32, 20)])
    OPS[0x08](m)
    assert len(m.stack) == 2
    assert m.stack.pop_var() == Var(VarType.INT32, 20)
    assert m.stack.pop_var() == Var(VarType.INT32, 10)


def test_pop_local_run_round_trip():
    m = FakeMachine(u32(ref(1, 2)), [Var(VarType.INT32, 0), Var(VarType.INT32, 0)])
    m.stack.push(11, VarType.INT32)
    m.stack.push(22, VarType.INT32)
    OPS[0x0E](m)
    assert [v.value for v in m.script.local_vars[1:]] == [11, 22]
    assert len(m.stack) == 0


def test_pop_local_converts_object_to_int():
    m = FakeMachine(u32(1), [Var(VarType.INT32, 0)])
    m.stack.push(5, VarType.OBJECT)
    OPS[0x0E](m)
    assert m.script.local_vars[1] == Var(VarType.INT32, 5)


def test_pop_local_rejects_float_into_int():
    m = FakeMachine(u32(1), [Var(VarType.INT32, 0)])
    m.stack.push_float(1.5)
    with pytest.raises(VMError):
        OPS[0x0E](m)


def test_illegal_count_byte_raises():
    m = FakeMachine(u32(0x01010001), [Var(VarType.INT32, 0)])
    with pytest.raises(VMError):
        OPS[0x08](m)


def test_push_me_from_static_method_raises():
    m = FakeMachine(u32(1))
    with pytest.raises(VMError):
        OPS[0x09](m)


def test_push_me_pushes_member():
    m = FakeMachine(u32(1))
    m.with_object([Var(VarType.INT32, 42)])
    OPS[0x09](m)
    assert m.stack.pop_var() == Var(VarType.INT32, 42)


def test_pop_me_run_round_trip():
    m = FakeMachine(u32(ref(1, 2)))
    obj = m.with_object([Var(VarType.INT32, 0), Var(VarType.INT32, 0)])
    m.stack.push(3, VarType.INT32)
    m.stack.push(4, VarType.INT32)
    OPS[0x0F](m)
    assert [v.value for v in obj.members[1:]] == [3, 4]


def test_push_member_null_object_raises():
    m = FakeMachine(u32(1))
    m.stack.push(0, VarType.OBJECT)
    with pytest.raises(VMError):
        OPS[0x0A](m)


def test_push_member_pushes_value():
    m = FakeMachine(u32(1))
    obj = m.objects.new(0, [Var(VarType.INT32, 17)])
    m.stack.push(obj.handle, VarType.OBJECT)
    OPS[0x0A](m)
    assert m.stack.pop_var() == Var(VarType.INT32, 17)
    assert len(m.stack) == 0


def test_pop_member_stores_value():
    m = FakeMachine(u32(1))
    obj = m.objects.new(0, [Var(VarType.INT32, 0)])
    m.stack.push(99, VarType.INT32)
    m.stack.push(obj.handle, VarType.OBJECT)
    OPS[0x10](m)
    assert obj.members[1] == Var(VarType.INT32, 99)


def test_pop_member_deleted_object_raises():
    m = FakeMachine(u32(1))
    obj = m.objects.new(0, [Var(VarType.INT32, 0)])
    m.objects.release(obj.handle)
    m.stack.push(1, VarType.INT32)
    m.stack.push(obj.handle, VarType.OBJECT)
    with pytest.raises(VMError):
        OPS[0x10](m)


@pytest.mark.parametrize("pop_op,push_op", [(0x12, 0x0C), (0x11, 0x0B)])
def test_static_round_trip(pop_op, push_op):
    m = FakeMachine(u32(1) + u32(1), statics=[Var(VarType.INT32, 0)])
    m.stack.push(-8, VarType.INT32)
    OPS[pop_op](m)
    assert m.script.class_data.static_vars[0].value == -8
    OPS[push_op](m)
    assert m.stack.pop_var() == Var(VarType.INT32, -8)


def test_push_static_run():
    m = FakeMachine(u32(ref(1, 2)), statics=[Var(VarType.INT32, 1), Var(VarType.INT32, 2)])
    OPS[0x0C](m)
    assert m.stack.pop_var().value == 2
    assert m.stack.pop_var().value == 1


def test_static_run_past_end_raises():
    m = FakeMachine(u32(ref(1, 3)), statics=[Var(VarType.INT32, 1), Var(VarType.INT32, 2)])
    with pytest.raises(VMError):
        OPS[0x0C](m)