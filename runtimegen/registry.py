"""In-memory model of a portable type registry describing runtime types."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Optional, Union


class Primitive(enum.Enum):
    """Primitive types known to the registry."""

    BOOL = "bool"
    CHAR = "char"
    STR = "str"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    U256 = "u256"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    I256 = "i256"


def _freeze(obj: object, *names: str) -> None:
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, str):
            raise TypeError(f"{name} must be a sequence, not a string")
        object.__setattr__(obj, name, tuple(value))


@dataclass(frozen=True, order=True)
class Path:
    """The fully qualified path of a type, e.g. ``("sp_core", "crypto", "AccountId32")``."""

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "segments")

    def ident(self) -> Optional[str]:
        """The last segment of the path, if there is one."""
        return self.segments[-1] if self.segments else None

    def namespace(self) -> tuple[str, ...]:
        """All segments except the last one."""
        return self.segments[:-1]


@dataclass(frozen=True)
class Field:
    """A field of a composite type or of an enum variant."""

    type_id: int
    name: Optional[str] = None
    type_name: Optional[str] = None
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "docs")


@dataclass(frozen=True)
class Variant:
    """A variant of an enum type."""

    name: str
    fields: tuple[Field, ...] = ()
    index: int = 0
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "fields", "docs")


@dataclass(frozen=True)
class TypeParam:
    """A generic parameter of a type; ``type_id`` is ``None`` when it was skipped."""

    name: str
    type_id: Optional[int] = None


@dataclass(frozen=True)
class TypeDefComposite:
    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "fields")


@dataclass(frozen=True)
class TypeDefVariant:
    variants: tuple[Variant, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "variants")


@dataclass(frozen=True)
class TypeDefSequence:
    type_param: int


@dataclass(frozen=True)
class TypeDefArray:
    length: int
    type_param: int


@dataclass(frozen=True)
class TypeDefTuple:
    fields: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "fields")


@dataclass(frozen=True)
class TypeDefPrimitive:
    primitive: Primitive


@dataclass(frozen=True)
class TypeDefCompact:
    type_param: int


@dataclass(frozen=True)
class TypeDefBitSequence:
    bit_store_type: int
    bit_order_type: int


TypeDef = Union[
    TypeDefComposite,
    TypeDefVariant,
    TypeDefSequence,
    TypeDefArray,
    TypeDefTuple,
    TypeDefPrimitive,
    TypeDefCompact,
    TypeDefBitSequence,
]


@dataclass(frozen=True)
class Type:
    """A registered type: its path, generic parameters, definition and docs."""

    type_def: TypeDef
    path: Path = Path()
    type_params: tuple[TypeParam, ...] = ()
    docs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "type_params", "docs")


class PortableRegistry:
    """A list of types addressed by their position; identical types share one id."""

    def __init__(self, types=()) -> None:
        self._types: list[Type] = []
        self._ids: dict[Type, int] = {}
        for ty in types:
            self.register(ty)

    def register(self, ty: Type) -> int:
        """Add a type (unless an identical one exists) and return its id."""
        existing = self._ids.get(ty)
        if existing is not None:
            return existing
        type_id = len(self._types)
        self._types.append(ty)
        self._ids[ty] = type_id
        return type_id

    def resolve(self, type_id: int) -> Type:
        """Return the type with the given id; raise ``KeyError`` if absent."""
        if 0 <= type_id < len(self._types):
            return self._types[type_id]
        raise KeyError(f"No type with id {type_id} found")

    def types(self) -> list[tuple[int, Type]]:
        """All registered types as ``(id, type)`` pairs in id order."""
        return list(enumerate(self._types))

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[Type]:
        return iter(self._types)