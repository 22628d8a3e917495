"""Generation of a module tree holding every type of a registry."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Union

from runtimegen.derives import CratePath, Derives, DerivesRegistry
from runtimegen.registry import (
    Path,
    PortableRegistry,
    Type,
    TypeDefArray,
    TypeDefBitSequence,
    TypeDefCompact,
    TypeDefComposite,
    TypeDefPrimitive,
    TypeDefSequence,
    TypeDefTuple,
    TypeDefVariant,
)
from runtimegen.type_def import TypeDefGen
from runtimegen.type_path import (
    ArrayType,
    BitVecType,
    CompactType,
    PathType,
    PrimitiveType,
    TupleType,
    TypeParameter,
    TypePath,
    VecType,
    from_type_def_path,
)


class Module:
    """A generated ``mod`` holding type definitions and child modules."""

    def __init__(self, name: str, root_mod: str) -> None:
        self.name = name
        self.root_mod = root_mod
        self.children: dict[str, Module] = {}
        self.types: dict[Path, TypeDefGen] = {}

    def child(self, name: str) -> "Module":
        """The child module called ``name``; raise ``KeyError`` if there is none."""
        try:
            return self.children[name]
        except KeyError:
            raise KeyError(f"Module '{self.name}' has no child module '{name}'") from None

    def render(self) -> str:
        """The module as generated code: child modules first, then types."""
        parts = [f"pub mod {self.name} {{", f"use super::{self.root_mod};"]
        parts.extend(self.children[name].render() for name in sorted(self.children))
        parts.extend(
            rendered
            for path in sorted(self.types)
            if (rendered := self.types[path].render())
        )
        parts.append("}")
        return "\n".join(parts)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Module(name={self.name!r}, root_mod={self.root_mod!r})"


class TypeGenerator:
    """Turns the types of a registry into type paths and type definitions."""

    def __init__(
        self,
        type_registry: PortableRegistry,
        root_mod: str,
        type_substitutes: Optional[Mapping[str, str]] = None,
        derives: Optional[DerivesRegistry] = None,
        crate_path: Union[CratePath, str, None] = None,
    ) -> None:
        if crate_path is None:
            crate_path = CratePath.default()
        elif not isinstance(crate_path, CratePath):
            crate_path = CratePath.parse(crate_path)
        self._registry = type_registry
        self._root_mod = root_mod
        self._type_substitutes: dict[str, str] = dict(type_substitutes or {})
        self._derives = derives if derives is not None else DerivesRegistry(crate_path)
        self._crate_path = crate_path

    @property
    def types_mod_ident(self) -> str:
        """Name of the module that holds the generated types."""
        return self._root_mod

    @property
    def crate_path(self) -> CratePath:
        return self._crate_path

    def generate_types_mod(self) -> Module:
        """A module tree holding a definition for every namespaced registry type."""
        root = Module(self._root_mod, self._root_mod)
        for _, ty in self._registry.types():
            namespace = ty.path.namespace()
            # Prelude types such as Option or Result have no namespace.
            if namespace:
                self._insert_type(ty, namespace, root)
        return root

    def _insert_type(self, ty: Type, namespace: tuple[str, ...], module: Module) -> None:
        for depth, segment in enumerate(namespace):
            if "::".join(namespace[depth:]) in self._type_substitutes:
                return
            child = module.children.get(segment)
            if child is None:
                child = Module(segment, self._root_mod)
                module.children[segment] = child
            module = child
        module.types[ty.path] = TypeDefGen.from_type(ty, self, self._crate_path)

    def resolve_type(self, type_id: int) -> Type:
        """The registry type with the given id; raise ``KeyError`` if absent."""
        return self._registry.resolve(type_id)

    def resolve_field_type_path(
        self, type_id: int, parent_type_params: Sequence[TypeParameter]
    ) -> TypePath:
        """The type path of a field, using the containing type's generic parameters."""
        return self._resolve_type_path(type_id, True, tuple(parent_type_params))

    def resolve_type_path(self, type_id: int) -> TypePath:
        """The type path of the given type."""
        return self._resolve_type_path(type_id, False, ())

    def _resolve_type_path(
        self,
        type_id: int,
        is_field: bool,
        parent_type_params: tuple[TypeParameter, ...],
    ) -> TypePath:
        for param in parent_type_params:
            if param.concrete_type_id == type_id:
                return param

        ty = self.resolve_type(type_id)
        if ty.path.ident() == "Cow":
            if not ty.type_params or ty.type_params[0].type_id is None:
                raise ValueError("type parameters to Cow are not expected to be skipped")
            ty = self.resolve_type(ty.type_params[0].type_id)

        def nested(inner_id: int) -> TypePath:
            return self._resolve_type_path(inner_id, False, parent_type_params)

        params = tuple(
            nested(param.type_id) for param in ty.type_params if param.type_id is not None
        )

        type_def = ty.type_def
        if isinstance(type_def, (TypeDefComposite, TypeDefVariant)):
            substitute = self._type_substitutes.get("::".join(ty.path.segments))
            if substitute is not None:
                return PathType(substitute, params)
            return from_type_def_path(ty.path, self._root_mod, params)
        if isinstance(type_def, TypeDefPrimitive):
            return PrimitiveType(type_def.primitive)
        if isinstance(type_def, TypeDefArray):
            return ArrayType(type_def.length, nested(type_def.type_param))
        if isinstance(type_def, TypeDefSequence):
            return VecType(nested(type_def.type_param))
        if isinstance(type_def, TypeDefTuple):
            return TupleType(tuple(nested(element) for element in type_def.fields))
        if isinstance(type_def, TypeDefCompact):
            return CompactType(nested(type_def.type_param), is_field, self._crate_path)
        if isinstance(type_def, TypeDefBitSequence):
            return BitVecType(
                nested(type_def.bit_order_type),
                nested(type_def.bit_store_type),
                self._crate_path,
            )
        raise TypeError(f"Unsupported type definition {type_def!r}")

    def default_derives(self) -> Derives:
        """The derives applied to all generated types."""
        return self._derives.default_derives()

    def type_derives(self, ty: Type) -> Derives:
        """The derives applied to the generated definition of ``ty``."""
        joined = "::".join(ty.path.segments)
        try:
            return self._derives.resolve(joined)
        except ValueError:
            raise ValueError(f"'{joined}' is an invalid type path") from None