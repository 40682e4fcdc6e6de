import pytest

from saucevm.program import ClassData, ClassTable, CodeEntry, RefEntry, RefType
from saucevm.types import BASE_HANDLE_CLASS, Var, VarType, VMError


def make_class(name="Foo"):
    return ClassData(
        strings=[name, "run()V", "x", "count", "Other"],
        refs=[
            RefEntry(RefType.CLASS, name_index=1),
            RefEntry(RefType.METHOD, name_index=2, data_index=1, flags=8),
            RefEntry(RefType.MEMBER, name_index=3, data_index=1),
            RefEntry(RefType.STATIC, name_index=4, data_index=1),
            RefEntry(RefType.CLASS, name_index=5),
            RefEntry(RefType.METHOD, name_index=2, class_index=5),
        ],
        codes=[CodeEntry(locals=[VarType.INT32], args_count=1)],
        static_vars=[Var(VarType.INT32, 42)],
        class_name=name,
    )


def test_string_lookup_is_one_based():
    data = make_class()
    assert data.string(1) == "Foo"
    assert data.string(2) == "run()V"
    assert data.string(0) == ""


def test_string_out_of_range():
    with pytest.raises(VMError):
        make_class().string(99)


def test_ref_lookup_and_bounds():
    data = make_class()
    assert data.ref(1).type == RefType.CLASS
    assert data.ref(3).name_index == 3
    with pytest.raises(VMError):
        data.ref(0)
    with pytest.raises(VMError):
        data.ref(len(data.refs) + 1)


def test_code_and_static_var_lookup():
    data = make_class()
    assert data.code(1).args_count == 1
    assert data.static_var(1).value == 42
    with pytest.raises(VMError):
        data.code(2)
    with pytest.raises(VMError):
        data.static_var(0)


def test_find_method_ignores_case():
    data = make_class()
    assert data.find_method("RUN()v") == 2
    assert data.find_method("run()V") == 2


def test_find_method_ignores_other_classes_and_missing():
    data = make_class()
    data.refs[1].class_index = 5
    assert data.find_method("run()V") == 0
    assert data.find_method("missing()V") == 0


def test_find_member_and_static():
    data = make_class()
    assert data.find_member("x") == 3
    assert data.find_static("COUNT") == 4
    assert data.find_member("count") == 0
    assert data.find_static("x") == 0


def test_refs_are_mutable_for_lazy_resolution():
    data = make_class()
    data.ref(5).class_handle = BASE_HANDLE_CLASS + 1
    assert data.ref(5).class_handle == BASE_HANDLE_CLASS + 1


def test_class_table_handles_start_after_null_class():
    table = ClassTable()
    first = make_class("Foo")
    second = make_class("Bar")
    assert table.add(first) == BASE_HANDLE_CLASS + 1
    assert table.add(second) == BASE_HANDLE_CLASS + 2
    assert first.class_handle == BASE_HANDLE_CLASS + 1
    assert table.get(second.class_handle) is second
    assert len(table) == 2


def test_class_table_find_and_name():
    table = ClassTable()
    handle = table.add(make_class("Main"))
    assert table.find("MAIN") == handle
    assert table.find("missing") == 0
    assert table.name(handle) == "Main"


def test_class_table_rejects_bad_handles():
    table = ClassTable()
    table.add(make_class())
    with pytest.raises(VMError):
        table.get(BASE_HANDLE_CLASS)
    with pytest.raises(VMError):
        table.get(BASE_HANDLE_CLASS + 2)
    with pytest.raises(VMError):
        table.get(BASE_HANDLE_CLASS - 1)


def test_class_table_limit():
    table = ClassTable(size=3)
    table.add(make_class("A"))
    table.add(make_class("B"))
    with pytest.raises(VMError):
        table.add(make_class("C"))
    assert len(table) == 2