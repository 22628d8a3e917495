"""Struct and enum definitions generated from registry types."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from runtimegen.composite_def import CompositeDef, CompositeDefFields
from runtimegen.derives import CratePath, Derives
from runtimegen.registry import Type, TypeDefComposite, TypeDefVariant
from runtimegen.type_def_params import TypeDefParameters
from runtimegen.type_path import TypeParameter

_FIELD_VISIBILITY = "pub"


def _doc_attrs(docs: Iterable[str]) -> list[str]:
    escaped = (
        doc.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        for doc in docs
    )
    return [f'#[doc = "{doc}"]' for doc in escaped]


@dataclass
class TypeDefGen:
    """A struct or enum definition for a registry type.

    Types that are neither composites nor variants are built in: they are
    already in scope and render as nothing.
    """

    type_params: TypeDefParameters
    derives: Derives
    docs: tuple[str, ...] = ()
    composite: Optional[CompositeDef] = None
    enum_name: Optional[str] = None
    variants: tuple[tuple[int, CompositeDef], ...] = ()

    @property
    def is_builtin(self) -> bool:
        return self.composite is None and self.enum_name is None

    @classmethod
    def from_type(
        cls, ty: Type, type_gen, crate_path: Union[CratePath, str]
    ) -> "TypeDefGen":
        """Build the definition of ``ty``, resolving field types through ``type_gen``."""
        derives = type_gen.type_derives(ty)
        type_params = TypeDefParameters(
            TypeParameter(
                concrete_type_id=param.type_id,
                original_name=param.name,
                name=f"_{position}",
            )
            for position, param in enumerate(ty.type_params)
            if param.type_id is not None
        )

        composite: Optional[CompositeDef] = None
        enum_name: Optional[str] = None
        variants: list[tuple[int, CompositeDef]] = []

        if isinstance(ty.type_def, TypeDefComposite):
            type_name = ty.path.ident()
            if type_name is None:
                raise ValueError("structs should have a name")
            fields = CompositeDefFields.from_scale_info_fields(
                type_name, ty.type_def.fields, type_params.params, type_gen
            )
            type_params.update_unused(fields.field_types())
            composite = CompositeDef.struct_def(
                ty,
                type_name,
                copy.copy(type_params),
                fields,
                _FIELD_VISIBILITY,
                type_gen,
                ty.docs,
                crate_path,
            )
        elif isinstance(ty.type_def, TypeDefVariant):
            enum_name = ty.path.ident()
            if enum_name is None:
                raise ValueError("variants should have a name")
            for variant in ty.type_def.variants:
                fields = CompositeDefFields.from_scale_info_fields(
                    variant.name, variant.fields, type_params.params, type_gen
                )
                type_params.update_unused(fields.field_types())
                variants.append(
                    (
                        variant.index,
                        CompositeDef.enum_variant_def(
                            variant.name, fields, variant.docs
                        ),
                    )
                )

        return cls(
            type_params=type_params,
            derives=derives,
            docs=tuple(ty.docs),
            composite=composite,
            enum_name=enum_name,
            variants=tuple(variants),
        )

    def render(self) -> str:
        """The definition as generated code; empty for built-in types."""
        if self.composite is not None:
            return self.composite.render()
        if self.enum_name is None:
            return ""

        items = [
            f"#[codec(index = {index})] {definition.render()}"
            for index, definition in self.variants
        ]
        phantom = self.type_params.unused_params_phantom_data()
        if phantom:
            items.append(f"__Ignore({phantom})")

        lines: list[str] = []
        derives = self.derives.render()
        if derives:
            lines.append(derives)
        lines.extend(_doc_attrs(self.docs))
        body = " ".join(f"{item}," for item in items)
        header = f"pub enum {self.enum_name}{self.type_params.render()}"
        lines.append(f"{header} {{ {body} }}" if body else f"{header} {{}}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()