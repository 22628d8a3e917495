"""Derive attributes applied to generated types, and the crate access path."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_PATH_RE = re.compile(rf"(?:::)?{_IDENT}(?:::{_IDENT})*")


def _normalize_path(text: str) -> str:
    compact = "".join(str(text).split())
    if not _PATH_RE.fullmatch(compact):
        raise ValueError(f"'{text}' is not a valid path")
    return compact


def _token_key(path: str) -> str:
    # Derives are ordered by their token-stream spelling, where `::` is spaced.
    return path.replace("::", " :: ").strip()


@dataclass(frozen=True)
class CratePath:
    """The path through which the generated code reaches the client crate."""

    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _normalize_path(self.path))

    @classmethod
    def parse(cls, text: str) -> "CratePath":
        """Parse a path such as ``::subxt`` or ``crate::client``."""
        return cls(text)

    @classmethod
    def default(cls) -> "CratePath":
        return cls("::subxt")

    def __str__(self) -> str:
        return self.path


def _as_crate_path(crate_path: Union[CratePath, str]) -> CratePath:
    return crate_path if isinstance(crate_path, CratePath) else CratePath.parse(crate_path)


class Derives:
    """A set of derive paths rendered as a single ``#[derive(...)]`` attribute."""

    def __init__(self, derives: Iterable[str] = ()) -> None:
        self._derives: set[str] = set()
        self.append(derives)

    @classmethod
    def default(cls, crate_path: Union[CratePath, str]) -> "Derives":
        """The codec derives from the client crate plus ``Debug``."""
        crate = _as_crate_path(crate_path)
        return cls(
            [
                f"{crate}::ext::codec::Encode",
                f"{crate}::ext::codec::Decode",
                "Debug",
            ]
        )

    def insert(self, derive: str) -> None:
        self._derives.add(_normalize_path(derive))

    def insert_codec_compact_as(self, crate_path: Union[CratePath, str]) -> None:
        self.insert(f"{_as_crate_path(crate_path)}::ext::codec::CompactAs")

    def append(self, derives: Iterable[str]) -> None:
        for derive in derives:
            self.insert(derive)

    def render(self) -> str:
        """The derive attribute, or an empty string when there are no derives."""
        if not self._derives:
            return ""
        return f"#[derive({', '.join(self)})]"

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._derives, key=_token_key))

    def __len__(self) -> int:
        return len(self._derives)

    def __contains__(self, derive: object) -> bool:
        return isinstance(derive, str) and "".join(derive.split()) in self._derives

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Derives):
            return NotImplemented
        return self._derives == other._derives

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Derives({list(self)!r})"


class DerivesRegistry:
    """Derives for all generated types plus extra derives for specific types."""

    def __init__(self, crate_path: Union[CratePath, str]) -> None:
        self._default = Derives.default(crate_path)
        self._specific: dict[str, Derives] = {}

    def extend_for_all(self, derives: Iterable[str]) -> None:
        """Add derives applied to every generated type."""
        self._default.append(derives)

    def extend_for_type(
        self,
        ty: str,
        derives: Iterable[str],
        crate_path: Union[CratePath, str],
    ) -> None:
        """Add derives applied only to the type at path ``ty``."""
        key = _normalize_path(ty)
        type_derives = self._specific.get(key)
        if type_derives is None:
            type_derives = Derives.default(crate_path)
            self._specific[key] = type_derives
        type_derives.append(derives)

    def default_derives(self) -> Derives:
        return self._default

    def resolve(self, ty: str) -> Derives:
        """The default derives combined with any registered for ``ty``."""
        resolved = Derives(self._default)
        specific = self._specific.get(_normalize_path(ty))
        if specific is not None:
            resolved.append(specific)
        return resolved