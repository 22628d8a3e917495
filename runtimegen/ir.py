"""Parsing of the module declaration that the generated API is placed into."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_PATH = rf"(?:::)?{_IDENT}(?:::{_IDENT})*"
_PATH_RE = re.compile(_PATH)
_VIS_RE = re.compile(r"pub\b(?:\s*\([^()]*\))?")
_MOD_RE = re.compile(rf"mod\b\s*(?P<ident>{_IDENT})")
_USE_RE = re.compile(
    r"(?:pub\b(?:\s*\([^()]*\))?\s*)?use\b\s*(?P<tree>.*?)\s*;", re.S
)
_META_RE = re.compile(
    rf'(?P<name>{_PATH})\s*\(\s*(?P<key>{_IDENT})\s*=\s*'
    r'"(?P<value>(?:[^"\\]|\\.)*)"\s*,?\s*\)',
    re.S,
)
_RAW_START = re.compile(r'r(#*)"')
_ESCAPE_RE = re.compile(r"\\(.)", re.S)
_ESCAPES = {"\\": "\\", '"': '"', "'": "'", "n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_CLOSERS = {"(": ")", "[": "]", "{": "}"}


class IrError(ValueError):
    """The module declaration cannot be used for code generation."""


@dataclass(frozen=True)
class TypeSubstitute:
    """A generated type replaced by a user-provided one."""

    generated_type_path: str
    substitute_with: str


@dataclass(frozen=True)
class RustItem:
    """Any other item of the module, kept as written."""

    text: str


Item = Union[TypeSubstitute, RustItem]


@dataclass(frozen=True)
class ItemMod:
    """A parsed inline module declaration."""

    ident: str
    vis: str = ""
    items: tuple[Item, ...] = ()
    attrs: tuple[str, ...] = ()

    def type_substitutes(self) -> dict[str, str]:
        """Map of generated type paths to the paths that replace them."""
        return {
            item.generated_type_path: item.substitute_with
            for item in self.items
            if isinstance(item, TypeSubstitute)
        }


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _quoted_end(text: str, start: int) -> int:
    i = start
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i + 1
        i += 1
    raise IrError("unterminated string literal")


def _raw_string_allowed(text: str, i: int) -> bool:
    if i == 0 or not _is_ident_char(text[i - 1]):
        return True
    return text[i - 1] == "b" and (i < 2 or not _is_ident_char(text[i - 2]))


def _literal_end(text: str, i: int) -> Optional[int]:
    """End of the string or char literal starting at ``i``, or ``None``."""
    ch = text[i]
    if ch == '"':
        return _quoted_end(text, i + 1)
    if ch == "'":
        if text.startswith("\\", i + 1):
            end = text.find("'", i + 3)
            if end < 0:
                raise IrError("unterminated character literal")
            return end + 1
        if i + 2 < len(text) and text[i + 2] == "'":
            return i + 3
        return None  # a lifetime
    if ch == "r" and _raw_string_allowed(text, i):
        match = _RAW_START.match(text, i)
        if match:
            closing = '"' + match.group(1)
            end = text.find(closing, match.end())
            if end < 0:
                raise IrError("unterminated raw string literal")
            return end + len(closing)
    return None


def _strip_comments(text: str) -> str:
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        end = _literal_end(text, i)
        if end is not None:
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline < 0 else newline
            out.append(" ")
        elif text.startswith("/*", i):
            depth = 1
            j = i + 2
            while depth:
                if j >= n:
                    raise IrError("unterminated block comment")
                if text.startswith("/*", j):
                    depth += 1
                    j += 2
                elif text.startswith("*/", j):
                    depth -= 1
                    j += 2
                else:
                    j += 1
            out.append(" ")
            i = j
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _match_close(text: str, open_pos: int) -> int:
    """Index just past the delimiter closing the one at ``open_pos``."""
    stack: list[str] = []
    i = open_pos
    while i < len(text):
        end = _literal_end(text, i)
        if end is not None:
            i = end
            continue
        ch = text[i]
        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ")]}":
            if not stack or stack.pop() != ch:
                raise IrError(f"unexpected closing delimiter `{ch}`")
            if not stack:
                return i + 1
        i += 1
    raise IrError("unclosed delimiter")


def _attribute_end(text: str, pos: int) -> int:
    i = pos + 1
    if text.startswith("!", i):
        i += 1
    i = _skip_ws(text, i)
    if not text.startswith("[", i):
        raise IrError("expected `[` after `#`")
    return _match_close(text, i)


def _split_items(body: str) -> list[str]:
    items: list[str] = []
    stack: list[str] = []
    start = 0
    i = 0
    while i < len(body):
        end = _literal_end(body, i)
        if end is not None:
            i = end
            continue
        ch = body[i]
        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ")]}":
            if not stack or stack.pop() != ch:
                raise IrError(f"unexpected closing delimiter `{ch}`")
            if not stack and ch == "}":
                stop = _skip_ws(body, i + 1)
                stop = stop + 1 if body.startswith(";", stop) else i + 1
                items.append(body[start:stop].strip())
                start = stop
                i = stop
                continue
        elif ch == ";" and not stack:
            items.append(body[start : i + 1].strip())
            start = i + 1
        i += 1
    if stack:
        raise IrError("unclosed delimiter")
    rest = body[start:].strip()
    if rest:
        raise IrError(f"expected `;` or `}}` after item: {rest}")
    return [item for item in items if item]


def _unescape(value: str) -> str:
    def replace(match: re.Match) -> str:
        try:
            return _ESCAPES[match.group(1)]
        except KeyError:
            raise IrError(f"unknown escape `\\{match.group(1)}`") from None

    return _ESCAPE_RE.sub(replace, value)


def _parse_substitute_attr(attr: str) -> str:
    inner = attr[attr.index("[") + 1 : -1].strip()
    match = _META_RE.fullmatch(inner)
    if match is None:
        raise IrError(f"Error parsing attribute meta: {attr}")
    key = match.group("key")
    if key != "substitute_type":
        raise IrError(f"Error parsing attribute meta: unknown variant `{key}`")
    return _unescape(match.group("value"))


def _parse_item(text: str) -> Item:
    pos = 0
    attrs: list[str] = []
    while text.startswith("#", pos) and not text.startswith("#!", pos):
        end = _attribute_end(text, pos)
        attrs.append(text[pos:end])
        pos = _skip_ws(text, end)

    match = _USE_RE.fullmatch(text, pos)
    if match is None:
        return RustItem(text)

    generated_paths = [_parse_substitute_attr(attr) for attr in attrs]
    if len(generated_paths) > 1:
        raise IrError("Duplicate `substitute_type` attributes")
    if not generated_paths:
        return RustItem(text)

    tree = match.group("tree")
    compact = "".join(tree.split())
    if not _PATH_RE.fullmatch(compact):
        raise IrError(f"The substitute path `{tree}` is not a type path")
    leading_colon = compact.startswith("::")
    path = compact[2:] if leading_colon else compact
    is_crate = path.split("::")[0] == "crate"
    if not leading_colon and not is_crate:
        raise IrError(
            "The substitute path must be a global absolute path; "
            "try prefixing with `::` or `crate`"
        )
    return TypeSubstitute(generated_type_path=generated_paths[0], substitute_with=path)


def parse_item_mod(source: str) -> ItemMod:
    """Parse an inline module declaration such as ``pub mod api { ... }``."""
    text = _strip_comments(source)
    pos = _skip_ws(text, 0)
    attrs: list[str] = []
    while text.startswith("#", pos):
        end = _attribute_end(text, pos)
        attrs.append(text[pos:end])
        pos = _skip_ws(text, end)

    vis = ""
    vis_match = _VIS_RE.match(text, pos)
    if vis_match:
        vis = "".join(vis_match.group().split())
        pos = _skip_ws(text, vis_match.end())

    mod_match = _MOD_RE.match(text, pos)
    if mod_match is None:
        raise IrError("expected a module declaration")
    ident = mod_match.group("ident")
    pos = _skip_ws(text, mod_match.end())

    if text.startswith(";", pos):
        raise IrError("out-of-line subxt modules are not supported")
    if not text.startswith("{", pos):
        raise IrError("expected `{` after the module name")
    close = _match_close(text, pos)
    if text[close:].strip():
        raise IrError("unexpected tokens after the module declaration")

    body = text[pos + 1 : close - 1]
    inner = _skip_ws(body, 0)
    while body.startswith("#!", inner):
        end = _attribute_end(body, inner)
        attrs.append(body[inner:end])
        inner = _skip_ws(body, end)

    items = tuple(_parse_item(item) for item in _split_items(body[inner:]))
    return ItemMod(ident=ident, vis=vis, items=items, attrs=tuple(attrs))