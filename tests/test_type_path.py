import pytest

from runtimegen.derives import CratePath
from runtimegen.registry import Path, Primitive
from runtimegen.type_path import (
    ArrayType,
    BitVecType,
    CompactType,
    PathType,
    PrimitiveType,
    TupleType,
    TypeParameter,
    VecType,
    from_type_def_path,
)

CRATE = CratePath("::subxt_path")
U8 = PrimitiveType(Primitive.U8)
U16 = PrimitiveType(Primitive.U16)
U32 = PrimitiveType(Primitive.U32)
U128 = PrimitiveType(Primitive.U128)
T0 = TypeParameter(1, "T", "_0")
T1 = TypeParameter(2, "U", "_1")


def test_primitive_render():
    assert U32.render() == "::core::primitive::u32"
    assert PrimitiveType(Primitive.STR).render() == "::std::string::String"


@pytest.mark.parametrize("primitive", [Primitive.U256, Primitive.I256])
def test_wide_primitives_rejected(primitive):
    with pytest.raises(ValueError):
        PrimitiveType(primitive).render()


def test_array_render():
    assert ArrayType(32, U8).render() == "[::core::primitive::u8; 32usize]"


def test_tuple_render():
    assert TupleType((T0, T1)).render() == "(_0, _1,)"
    assert TupleType((U32, U32)).render() == (
        "(::core::primitive::u32, ::core::primitive::u32,)"
    )
    assert TupleType(()).render() == "()"


def test_vec_render_and_param():
    vec = VecType(U16)
    assert vec.render() == "::std::vec::Vec<::core::primitive::u16>"
    assert vec.vec_type_param() == U16
    assert U16.vec_type_param() is None
    assert T0.vec_type_param() is None


def test_compact_render():
    compact = CompactType(U128, False, CRATE)
    assert compact.render() == "::subxt_path::ext::codec::Compact<::core::primitive::u128>"
    assert CompactType(U128, True, CRATE).render() == "::core::primitive::u128"
    assert compact.is_compact()
    assert not U128.is_compact()
    assert not T0.is_compact()


def test_bitvec_render():
    lsb = PathType("root::bitvec::order::Lsb0")
    bitvec = BitVecType(lsb, U8, CRATE)
    assert bitvec.render() == (
        "::subxt_path::ext::bitvec::vec::BitVec<"
        "::core::primitive::u8, root::bitvec::order::Lsb0>"
    )


def test_prelude_path():
    option = from_type_def_path(Path(("Option",)), "root", [PrimitiveType(Primitive.BOOL)])
    assert option.render() == "::core::option::Option<::core::primitive::bool>"


def test_generated_path_is_rooted():
    child = from_type_def_path(Path(("subxt_codegen", "types", "tests", "Child")), "root", [])
    assert child.render() == "root::subxt_codegen::types::tests::Child"


def test_generic_generated_path():
    foo = from_type_def_path(Path(("subxt_codegen", "types", "tests", "Foo")), "root", [T0, U32])
    assert str(foo) == "root::subxt_codegen::types::tests::Foo<_0, ::core::primitive::u32>"


def test_unknown_prelude_type():
    with pytest.raises(ValueError, match="Unknown prelude type 'Mystery'"):
        from_type_def_path(Path(("Mystery",)), "root", [])


def test_empty_path_rejected():
    with pytest.raises(ValueError, match="Type has no ident"):
        from_type_def_path(Path(), "root", [])


def test_parent_type_params_nested():
    nested = PathType(
        "::core::option::Option",
        (TupleType((T0, VecType(CompactType(T1, False, CRATE)))),),
    )
    assert nested.parent_type_params() == {T0, T1}
    assert U32.parent_type_params() == frozenset()
    assert T0.parent_type_params() == {T0}


def test_parent_type_params_bitvec_and_array():
    assert BitVecType(T0, T1, CRATE).parent_type_params() == {T0, T1}
    assert ArrayType(4, T1).parent_type_params() == {T1}


def test_type_parameter_ordering_and_render():
    assert sorted([T1, T0]) == [T0, T1]
    assert T0.render() == T0.name
    assert str(T1) == T1.name
    assert ArrayType(32, T0).render().startswith("[_0;")