"""Structs and enum variants made of a set of fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence, Union

from runtimegen.derives import CratePath, Derives
from runtimegen.registry import Field, Primitive, Type, TypeDefPrimitive
from runtimegen.type_def_params import TypeDefParameters
from runtimegen.type_path import TypeParameter, TypePath

_COMPACT_ATTR = "#[codec(compact)]"
_SKIP_ATTR = "#[codec(skip)]"
_UNUSED_PARAMS_FIELD = "__subxt_unused_type_params"

_COMPACT_AS_PRIMITIVES = frozenset(
    {Primitive.U8, Primitive.U16, Primitive.U32, Primitive.U64, Primitive.U128}
)


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _doc_attrs(docs: Iterable[str]) -> list[str]:
    return [f'#[doc = "{_escape(doc)}"]' for doc in docs]


def _join(*parts: Optional[str]) -> str:
    return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class CompositeDefFieldType:
    """A field of a composite type to be generated."""

    type_id: int
    type_path: TypePath
    type_name: Optional[str] = None

    def is_boxed(self) -> bool:
        """Whether the field's declared type is a ``Box``."""
        return self.type_name is not None and "Box<" in self.type_name

    def compact_attr(self) -> Optional[str]:
        """The compact codec attribute if the field's type is compact."""
        return _COMPACT_ATTR if self.type_path.is_compact() else None

    def render(self) -> str:
        path = self.type_path.render()
        return f"::std::boxed::Box<{path}>" if self.is_boxed() else path

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class CompositeDefFields:
    """The fields of a composite: none, all named, or all unnamed."""

    named: tuple[tuple[str, CompositeDefFieldType], ...] = ()
    unnamed: tuple[CompositeDefFieldType, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "named", tuple((n, t) for n, t in self.named))
        object.__setattr__(self, "unnamed", tuple(self.unnamed))
        if self.named and self.unnamed:
            raise ValueError("Fields should either be all named or all unnamed.")

    @property
    def is_empty(self) -> bool:
        return not self.named and not self.unnamed

    @classmethod
    def from_scale_info_fields(
        cls,
        name: str,
        fields: Sequence[Field],
        parent_type_params: Sequence[TypeParameter],
        type_gen,
    ) -> "CompositeDefFields":
        """Build the fields from registry fields, resolving their type paths."""
        named: list[tuple[str, CompositeDefFieldType]] = []
        unnamed: list[CompositeDefFieldType] = []
        for registry_field in fields:
            type_path = type_gen.resolve_field_type_path(
                registry_field.type_id, parent_type_params
            )
            field_type = CompositeDefFieldType(
                registry_field.type_id, type_path, registry_field.type_name
            )
            if registry_field.name is not None:
                named.append((registry_field.name, field_type))
            else:
                unnamed.append(field_type)
        if named and unnamed:
            raise ValueError(
                f"'{name}': Fields should either be all named or all unnamed."
            )
        return cls(named=tuple(named), unnamed=tuple(unnamed))

    def field_types(self) -> Iterator[CompositeDefFieldType]:
        """The types of all fields, in order."""
        if self.named:
            return (field_type for _, field_type in self.named)
        return iter(self.unnamed)

    def to_struct_field_tokens(
        self, phantom_data: Optional[str], visibility: Optional[str]
    ) -> str:
        """The field list of a struct, with a marker for unused type parameters."""
        if self.is_empty:
            return f"({phantom_data})" if phantom_data else ""
        if self.named:
            items = [
                _join(ty.compact_attr(), visibility, f"{name}: {ty.render()}") + ","
                for name, ty in self.named
            ]
            if phantom_data:
                items.append(
                    _join(
                        _SKIP_ATTR,
                        visibility,
                        f"{_UNUSED_PARAMS_FIELD}: {phantom_data}",
                    )
                )
            return "{ " + " ".join(items) + " }"
        items = [
            _join(ty.compact_attr(), visibility, ty.render()) + ","
            for ty in self.unnamed
        ]
        if phantom_data:
            items.append(_join(_SKIP_ATTR, visibility, phantom_data))
        return "(" + " ".join(items) + ")"

    def to_enum_variant_field_tokens(self) -> str:
        """The field list of an enum variant."""
        if self.named:
            items = [
                _join(ty.compact_attr(), f"{name}: {ty.render()}") + ","
                for name, ty in self.named
            ]
            return "{ " + " ".join(items) + " }"
        if self.unnamed:
            items = [_join(ty.compact_attr(), ty.render()) + "," for ty in self.unnamed]
            return "(" + " ".join(items) + ")"
        return ""


@dataclass
class StructKind:
    """A composite generated as a standalone struct."""

    derives: Derives
    type_params: TypeDefParameters
    field_visibility: Optional[str] = None


@dataclass(frozen=True)
class EnumVariantKind:
    """A composite generated as a variant of an enum."""


@dataclass
class CompositeDef:
    """A struct or enum variant definition made of a set of fields."""

    name: str
    kind: Union[StructKind, EnumVariantKind]
    fields: CompositeDefFields
    docs: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        self.docs = tuple(self.docs)

    @classmethod
    def struct_def(
        cls,
        ty: Type,
        ident: str,
        type_params: TypeDefParameters,
        fields_def: CompositeDefFields,
        field_visibility: Optional[str],
        type_gen,
        docs: Iterable[str],
        crate_path: Union[CratePath, str],
    ) -> "CompositeDef":
        """A standalone struct; single unsigned-int wrappers also derive ``CompactAs``."""
        derives = type_gen.type_derives(ty)
        fields = list(fields_def.field_types())
        if len(fields) == 1:
            only = fields[0]
            uses_param = any(
                tp.original_name == only.type_name for tp in type_params.params
            )
            if not uses_param:
                resolved = type_gen.resolve_type(only.type_id)
                if (
                    isinstance(resolved.type_def, TypeDefPrimitive)
                    and resolved.type_def.primitive in _COMPACT_AS_PRIMITIVES
                ):
                    derives.insert_codec_compact_as(crate_path)
        return cls(
            name=ident,
            kind=StructKind(derives, type_params, field_visibility),
            fields=fields_def,
            docs=tuple(docs),
        )

    @classmethod
    def enum_variant_def(
        cls, ident: str, fields: CompositeDefFields, docs: Iterable[str]
    ) -> "CompositeDef":
        """A variant of an enum."""
        return cls(name=ident, kind=EnumVariantKind(), fields=fields, docs=tuple(docs))

    def render(self) -> str:
        """The definition as generated code."""
        lines: list[str] = []
        if isinstance(self.kind, StructKind):
            derives = self.kind.derives.render()
            if derives:
                lines.append(derives)
            lines.extend(_doc_attrs(self.docs))
            tokens = self.fields.to_struct_field_tokens(
                self.kind.type_params.unused_params_phantom_data(),
                self.kind.field_visibility,
            )
            decl = f"pub struct {self.name}{self.kind.type_params.render()}"
            if self.fields.named:
                decl = f"{decl} {tokens}"
            else:
                decl = f"{decl}{tokens};"
        else:
            lines.extend(_doc_attrs(self.docs))
            tokens = self.fields.to_enum_variant_field_tokens()
            if self.fields.named:
                decl = f"{self.name} {tokens}"
            else:
                decl = f"{self.name}{tokens}"
        lines.append(decl)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()