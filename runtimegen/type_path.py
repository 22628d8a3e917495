"""Type paths used to refer to types inside generated code."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from runtimegen.derives import CratePath
from runtimegen.registry import Path, Primitive

_PRIMITIVE_PATHS = {
    Primitive.BOOL: "::core::primitive::bool",
    Primitive.CHAR: "::core::primitive::char",
    Primitive.STR: "::std::string::String",
    Primitive.U8: "::core::primitive::u8",
    Primitive.U16: "::core::primitive::u16",
    Primitive.U32: "::core::primitive::u32",
    Primitive.U64: "::core::primitive::u64",
    Primitive.U128: "::core::primitive::u128",
    Primitive.I8: "::core::primitive::i8",
    Primitive.I16: "::core::primitive::i16",
    Primitive.I32: "::core::primitive::i32",
    Primitive.I64: "::core::primitive::i64",
    Primitive.I128: "::core::primitive::i128",
}

_PRELUDE_PATHS = {
    "Option": "::core::option::Option",
    "Result": "::core::result::Result",
    "Cow": "::std::borrow::Cow",
    "BTreeMap": "::std::collections::BTreeMap",
    "BTreeSet": "::std::collections::BTreeSet",
    "Range": "::core::ops::Range",
    "RangeInclusive": "::core::ops::RangeInclusive",
}


def _vec_element(path: "TypePath") -> Optional["TypePath"]:
    """The element type of a sequence path, or None for anything else."""
    if isinstance(path, VecType):
        return path.of
    return None


@dataclass(frozen=True, order=True)
class TypeParameter:
    """A generic parameter of the containing type, used in place of a concrete type."""

    concrete_type_id: int
    original_name: str
    name: str

    def render(self) -> str:
        return self.name

    def parent_type_params(self) -> frozenset["TypeParameter"]:
        return frozenset({self})

    def is_compact(self) -> bool:
        return False

    def vec_type_param(self) -> Optional["TypePath"]:
        return _vec_element(self)

    def __str__(self) -> str:
        return self.render()


class TypePathType(abc.ABC):
    """A concrete (non-parameter) type path."""

    @abc.abstractmethod
    def render(self) -> str:
        """The type as it is written in generated code."""

    @abc.abstractmethod
    def parent_type_params(self) -> frozenset[TypeParameter]:
        """Type parameters of the containing type used anywhere in this path."""

    def is_compact(self) -> bool:
        return False

    def vec_type_param(self) -> Optional["TypePath"]:
        """The element type if this is a sequence."""
        return _vec_element(self)

    def __str__(self) -> str:
        return self.render()


TypePath = Union[TypeParameter, TypePathType]


def _collect(paths: Iterable[TypePath]) -> frozenset[TypeParameter]:
    found: set[TypeParameter] = set()
    for path in paths:
        found |= path.parent_type_params()
    return frozenset(found)


@dataclass(frozen=True)
class PathType(TypePathType):
    path: str
    params: tuple[TypePath, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))

    def render(self) -> str:
        if not self.params:
            return self.path
        return f"{self.path}<{', '.join(p.render() for p in self.params)}>"

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return _collect(self.params)


@dataclass(frozen=True)
class VecType(TypePathType):
    of: TypePath

    def render(self) -> str:
        return f"::std::vec::Vec<{self.of.render()}>"

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return self.of.parent_type_params()


@dataclass(frozen=True)
class ArrayType(TypePathType):
    length: int
    of: TypePath

    def render(self) -> str:
        return f"[{self.of.render()}; {self.length}usize]"

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return self.of.parent_type_params()


@dataclass(frozen=True)
class TupleType(TypePathType):
    elements: tuple[TypePath, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    def render(self) -> str:
        return "(" + "".join(f"{e.render()}, " for e in self.elements).rstrip(" ") + ")"

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return _collect(self.elements)


@dataclass(frozen=True)
class PrimitiveType(TypePathType):
    primitive: Primitive

    def render(self) -> str:
        try:
            return _PRIMITIVE_PATHS[self.primitive]
        except KeyError:
            raise ValueError(f"{self.primitive.value} is not a rust primitive") from None

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return frozenset()


@dataclass(frozen=True)
class CompactType(TypePathType):
    inner: TypePath
    is_field: bool
    crate_path: CratePath

    def render(self) -> str:
        # Compact fields use the inner type directly, marked by a codec attribute.
        if self.is_field:
            return self.inner.render()
        return f"{self.crate_path}::ext::codec::Compact<{self.inner.render()}>"

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return self.inner.parent_type_params()

    def is_compact(self) -> bool:
        return True


@dataclass(frozen=True)
class BitVecType(TypePathType):
    bit_order_type: TypePath
    bit_store_type: TypePath
    crate_path: CratePath

    def render(self) -> str:
        return (
            f"{self.crate_path}::ext::bitvec::vec::BitVec<"
            f"{self.bit_store_type.render()}, {self.bit_order_type.render()}>"
        )

    def parent_type_params(self) -> frozenset[TypeParameter]:
        return _collect((self.bit_order_type, self.bit_store_type))


def from_type_def_path(
    path: Path, root_mod_ident: str, params: Iterable[TypePath]
) -> PathType:
    """Build the path to a prelude type or to a type in the generated types module."""
    segments = path.segments
    if not segments:
        raise ValueError("Type has no ident")
    if len(segments) == 1:
        ident = segments[0]
        try:
            resolved = _PRELUDE_PATHS[ident]
        except KeyError:
            raise ValueError(f"Unknown prelude type '{ident}'") from None
    else:
        resolved = "::".join((root_mod_ident, *segments))
    return PathType(resolved, tuple(params))