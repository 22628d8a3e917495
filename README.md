# runtimegen

`runtimegen` turns a Substrate runtime's portable type registry into source
declarations: a tree of modules holding one `struct` or `enum` for every
namespaced type, with derive attributes, generic parameters, compact
annotations and `PhantomData` markers for unused parameters.

It can also fetch the raw metadata from a node over HTTP(S) or WebSocket.

## Installation

```
pip install runtimegen
```

## Describing types

A registry is built in memory from the classes in `runtimegen.registry`.
`PortableRegistry.register` adds a `Type` and returns its id; registering an
identical type again returns the existing id.

```python
from runtimegen.registry import (
    Field, Path, PortableRegistry, Primitive, Type,
    TypeDefComposite, TypeDefPrimitive,
)

registry = PortableRegistry()
u32 = registry.register(Type(TypeDefPrimitive(Primitive.U32)))
registry.register(
    Type(
        TypeDefComposite([Field(u32, name="a")]),
        path=Path(("my_pallet", "Foo")),
    )
)
```

The other type definitions are `TypeDefVariant` (with `Variant`s),
`TypeDefSequence`, `TypeDefArray`, `TypeDefTuple`, `TypeDefCompact` and
`TypeDefBitSequence`. Generic parameters are given as `TypeParam`s.

## Generating types

```python
from runtimegen.derives import CratePath, DerivesRegistry
from runtimegen.generator import TypeGenerator

crate_path = CratePath.parse("::subxt")
derives = DerivesRegistry(crate_path)
derives.extend_for_all(["Clone", "Eq"])

generator = TypeGenerator(registry, "runtime_types", {}, derives, crate_path)
types_mod = generator.generate_types_mod()
print(types_mod.render())
print(types_mod.child("my_pallet").render())
```

Types without a namespace (prelude types such as `Option` or `Result`) and
primitives, sequences, arrays and the like get no definition of their own;
they are referred to by path where they are used.

Every generated type gets the default derives (`Encode` and `Decode` under
`<crate path>::ext::codec`, and `Debug`), plus anything added with
`extend_for_all`, plus anything added for that particular type path with
`extend_for_type`. Derives are rendered in sorted order. A struct with a
single field of type `u8`, `u16`, `u32`, `u64` or `u128` also derives
`CompactAs`.

`TypeGenerator.resolve_type_path(type_id)` gives the path used to refer to a
type in generated code; `render()` on the result gives its text.

## Type substitutes

The third argument of `TypeGenerator` maps generated type paths such as
`"sp_core::crypto::AccountId32"` to paths used in their place; substituted
types are not generated. Substitutes can be read from an annotated module:

```python
from runtimegen.ir import parse_item_mod

item_mod = parse_item_mod('''
pub mod api {
    #[subxt(substitute_type = "sp_arithmetic::per_things::Perbill")]
    use ::my_crate::Perbill;
}
''')
substitutes = item_mod.type_substitutes()
# {"sp_arithmetic::per_things::Perbill": "my_crate::Perbill"}
```

A substitute path must be absolute (starting with `::` or `crate`). A relative
path, more than one attribute on one `use`, an unknown attribute key, or a
module without a body (`mod api;`) raises `IrError`.

## Fetching metadata

```python
from runtimegen.fetch_metadata import (
    FetchMetadataError, fetch_metadata_bytes, fetch_metadata_hex,
)

try:
    raw_hex = fetch_metadata_hex("http://localhost:9933")   # "0x..." string
    encoded = fetch_metadata_bytes("ws://localhost:9944")   # decoded bytes
except FetchMetadataError as err:
    print(err)
```

Both call the node's `state_getMetadata` RPC method with a 180 second timeout.
Supported schemes are `http`, `https`, `ws` and `wss`. Any other scheme raises
`InvalidSchemeError`; a failed or rejected request raises `RequestError`; a
reply that is not valid hex raises `DecodeError`. All three derive from
`FetchMetadataError`.

## What it does not do

- It does not decode the SCALE-encoded metadata it fetches; the type registry
  has to be built with the classes above.
- It generates type declarations only: no call, event, storage or constant
  APIs for pallets.
- It has no command-line program; it is used as a library.