import pytest

from facetkit.value import (
    IncompatibleConversionError,
    MarkerTraits,
    ParseError,
    TryFromError,
    TypeNameOpts,
    UnimplementedConversionError,
    ValueVTable,
    vtable_for,
)


def test_type_name_opts_default_is_infinite():
    assert TypeNameOpts() == TypeNameOpts.infinite()
    assert TypeNameOpts().recurse_ttl == -1


def test_type_name_opts_none_has_no_children():
    assert TypeNameOpts.none().recurse_ttl == 0
    assert TypeNameOpts.none().for_children() is None


def test_type_name_opts_one_decrements():
    child = TypeNameOpts.one().for_children()
    assert child == TypeNameOpts.none()
    assert child.for_children() is None


def test_type_name_opts_infinite_stays_infinite():
    opts = TypeNameOpts.infinite()
    for _ in range(5):
        opts = opts.for_children()
    assert opts == TypeNameOpts.infinite()


def test_parse_error_message():
    err = ParseError()
    assert str(err) == "Parse failed: failed to parse string"
    assert isinstance(err, ValueError)


def test_try_from_error_messages():
    assert str(TryFromError("nope")) == "Conversion failed: nope"
    err = UnimplementedConversionError("u64")
    assert str(err) == (
        "Conversion failed: Shape u64 doesn't implement any conversions (no try_from function)"
    )
    assert err.shape == "u64"
    inc = IncompatibleConversionError("String", "u64")
    assert str(inc) == "Conversion failed: Cannot convert from shape String to shape u64"
    assert isinstance(inc, TryFromError)


def test_marker_trait_queries():
    vt = ValueVTable(type_name=lambda o: "X", marker_traits=MarkerTraits.EQ | MarkerTraits.COPY)
    assert vt.is_eq() and vt.is_copy()
    assert not vt.is_send() and not vt.is_sync()


def test_empty_vtable_has_no_operations():
    vt = ValueVTable(type_name=lambda o: "X")
    assert vt.parse is None and vt.eq is None and vt.default is None
    assert not vt.is_eq()


def test_int_vtable():
    vt = vtable_for(int)
    assert vt.type_name(TypeNameOpts()) == "int"
    assert vt.parse("42") == 42
    assert vt.parse("-7") == -7
    assert vt.default() == 0
    assert vt.is_eq() and vt.is_copy() and vt.is_send() and vt.is_sync()
    assert vt.ord(1, 2) == -1 and vt.ord(2, 2) == 0 and vt.ord(3, 2) == 1
    assert vt.hash(5) == hash(5)
    assert vt.display(12) == "12"


@pytest.mark.parametrize("text", ["abc", "1_000", " 5", "", "1.5"])
def test_int_parse_rejects(text):
    with pytest.raises(ParseError):
        vtable_for(int).parse(text)


def test_bool_parse():
    vt = vtable_for(bool)
    assert vt.parse("true") is True
    assert vt.parse("false") is False
    with pytest.raises(ParseError):
        vt.parse("True")


def test_float_vtable_is_not_eq():
    vt = vtable_for(float)
    assert vt.parse("2.5") == 2.5
    assert not vt.is_eq()
    assert vt.ord is None
    nan = float("nan")
    assert vt.partial_ord(nan, 1.0) is None
    assert vt.partial_ord(1.0, 2.0) == -1
    with pytest.raises(ParseError):
        vt.parse("1_0.0")


def test_str_vtable():
    vt = vtable_for(str, "String")
    assert vt.type_name(TypeNameOpts.none()) == "String"
    assert vt.parse(" hi ") == " hi "
    assert vt.default() == ""
    assert not vt.is_copy()
    assert vt.debug("a") == repr("a")


def test_list_vtable_unhashable():
    vt = vtable_for(list)
    assert vt.hash is None
    assert not vt.is_eq()
    assert vt.parse is None
    original = [1, 2]
    cloned = vt.clone(original)
    assert cloned == original and cloned is not original


def test_custom_type_name_function():
    def name(opts):
        child = opts.for_children()
        return "Vec<u32>" if child is not None else "Vec<…>"

    vt = vtable_for(list, name)
    assert vt.type_name(TypeNameOpts.infinite()) == "Vec<u32>"
    assert vt.type_name(TypeNameOpts.none()) == "Vec<…>"


def test_no_default_for_required_args():
    class NeedsArg:
        def __init__(self, x):
            self.x = x

    vt = vtable_for(NeedsArg)
    assert vt.default is None
    assert vt.partial_ord is None
    assert vt.eq(vt, vt) is True