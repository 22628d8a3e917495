"""Generic type parameters of a generated type definition."""

from __future__ import annotations

from typing import Iterable, Optional

from runtimegen.type_path import TypeParameter

_PHANTOM_DATA = "::core::marker::PhantomData"


class TypeDefParameters:
    """The generic parameters of a type definition, e.g. the ``T`` in ``Foo<T>``.

    Tracks which parameters are not used by any field, so that a ``PhantomData``
    marker can be generated for them.
    """

    def __init__(self, params: Iterable[TypeParameter] = ()) -> None:
        self._params: tuple[TypeParameter, ...] = tuple(params)
        self._unused: set[TypeParameter] = set(self._params)

    @property
    def params(self) -> tuple[TypeParameter, ...]:
        """All type parameters, in declaration order."""
        return self._params

    @property
    def unused(self) -> tuple[TypeParameter, ...]:
        """The parameters not used by any field, in sorted order."""
        return tuple(sorted(self._unused))

    def update_unused(self, fields: Iterable[object]) -> None:
        """Mark as used every parameter that appears in the given fields' type paths."""
        used: set[TypeParameter] = set()
        for field in fields:
            used |= field.type_path.parent_type_params()
        self._unused -= used

    def unused_params_phantom_data(self) -> Optional[str]:
        """A ``PhantomData`` type covering the unused parameters, or ``None``."""
        if not self._unused:
            return None
        names = [param.render() for param in sorted(self._unused)]
        inner = names[0] if len(names) == 1 else f"({', '.join(names)})"
        return f"{_PHANTOM_DATA}<{inner}>"

    def render(self) -> str:
        """The generic parameter list, or an empty string when there are none."""
        if not self._params:
            return ""
        return f"<{', '.join(param.render() for param in self._params)}>"

    def __copy__(self) -> "TypeDefParameters":
        duplicate = TypeDefParameters(self._params)
        duplicate._unused = set(self._unused)
        return duplicate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeDefParameters):
            return NotImplemented
        return self._params == other._params and self._unused == other._unused

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TypeDefParameters(params={self._params!r}, unused={self.unused!r})"