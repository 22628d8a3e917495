import copy

from runtimegen.composite_def import CompositeDefFieldType
from runtimegen.registry import Primitive
from runtimegen.type_def_params import TypeDefParameters
from runtimegen.type_path import PathType, PrimitiveType, TypeParameter, VecType

P0 = TypeParameter(concrete_type_id=1, original_name="T", name="_0")
P1 = TypeParameter(concrete_type_id=2, original_name="U", name="_1")


def _field(path):
    return CompositeDefFieldType(type_id=99, type_path=path, type_name=None)


def test_no_params_renders_nothing():
    params = TypeDefParameters([])
    assert params.render() == ""
    assert params.unused_params_phantom_data() is None


def test_render_lists_params_in_order():
    params = TypeDefParameters([P0, P1])
    assert params.render() == "<_0, _1>"
    assert params.params == (P0, P1)


def test_single_unused_param_phantom_data():
    params = TypeDefParameters([P0])
    assert params.unused_params_phantom_data() == "::core::marker::PhantomData<_0>"


def test_multiple_unused_params_phantom_data():
    params = TypeDefParameters([P0, P1])
    assert (
        params.unused_params_phantom_data()
        == "::core::marker::PhantomData<(_0, _1)>"
    )


def test_update_unused_removes_used_params():
    params = TypeDefParameters([P0, P1])
    params.update_unused([_field(P0)])
    assert params.unused == (P1,)
    assert params.unused_params_phantom_data() == (
        f"::core::marker::PhantomData<{P1.name}>"
    )


def test_update_unused_finds_nested_params():
    params = TypeDefParameters([P0, P1])
    nested = PathType("::core::option::Option", (VecType(P1),))
    params.update_unused([_field(nested), _field(P0)])
    assert params.unused == ()
    assert params.unused_params_phantom_data() is None


def test_update_unused_ignores_concrete_fields():
    params = TypeDefParameters([P0])
    params.update_unused([_field(PrimitiveType(Primitive.U32))])
    assert params.unused == (P0,)


def test_unused_are_sorted_by_concrete_id():
    late = TypeParameter(concrete_type_id=5, original_name="A", name="_0")
    early = TypeParameter(concrete_type_id=2, original_name="B", name="_1")
    params = TypeDefParameters([late, early])
    assert params.unused == (early, late)
    assert params.unused_params_phantom_data() == (
        f"::core::marker::PhantomData<({early.name}, {late.name})>"
    )


def test_copy_is_independent():
    params = TypeDefParameters([P0, P1])
    duplicate = copy.copy(params)
    assert duplicate == params
    duplicate.update_unused([_field(P0)])
    assert params.unused == (P0, P1)
    assert duplicate.unused == (P1,)