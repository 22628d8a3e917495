import pytest

from runtimegen.ir import IrError, ItemMod, RustItem, TypeSubstitute, parse_item_mod


def test_empty_module():
    module = parse_item_mod("pub mod api {}")
    assert module.ident == "api"
    assert module.vis == "pub"
    assert module.items == ()
    assert module.type_substitutes() == {}


def test_restricted_visibility_and_private():
    assert parse_item_mod("pub ( crate ) mod api {}").vis == "pub(crate)"
    assert parse_item_mod("mod inner {}").vis == ""


def test_crate_substitute():
    module = parse_item_mod(
        """
        pub mod api {
            #[subxt(substitute_type = "sp_runtime::multiaddress::MultiAddress")]
            use crate::my::Address;
        }
        """
    )
    assert module.type_substitutes() == {
        "sp_runtime::multiaddress::MultiAddress": "crate::my::Address"
    }
    assert module.items == (
        TypeSubstitute(
            generated_type_path="sp_runtime::multiaddress::MultiAddress",
            substitute_with="crate::my::Address",
        ),
    )


def test_global_substitute_loses_leading_colon():
    module = parse_item_mod(
        'pub mod api { #[subxt(substitute_type = "a::B")] use ::other::B; }'
    )
    assert module.type_substitutes() == {"a::B": "other::B"}


def test_relative_substitute_path_rejected():
    with pytest.raises(IrError, match="global absolute path"):
        parse_item_mod('pub mod api { #[subxt(substitute_type = "a::B")] use other::B; }')


def test_out_of_line_module_rejected():
    with pytest.raises(IrError, match="out-of-line"):
        parse_item_mod("pub mod api;")


def test_not_a_module_rejected():
    with pytest.raises(IrError):
        parse_item_mod("pub struct api {}")


def test_duplicate_attributes_rejected():
    source = """
    pub mod api {
        #[subxt(substitute_type = "a::B")]
        #[subxt(substitute_type = "a::C")]
        use crate::B;
    }
    """
    with pytest.raises(IrError, match="Duplicate"):
        parse_item_mod(source)


def test_other_attribute_on_use_rejected():
    with pytest.raises(IrError, match="Error parsing attribute meta"):
        parse_item_mod("pub mod api { #[allow(unused)] use crate::B; }")


def test_unknown_attribute_key_rejected():
    with pytest.raises(IrError, match="unknown variant"):
        parse_item_mod('pub mod api { #[subxt(other = "a::B")] use crate::B; }')


def test_group_use_tree_rejected():
    with pytest.raises(IrError, match="not a type path"):
        parse_item_mod(
            'pub mod api { #[subxt(substitute_type = "a::B")] use ::x::{B, C}; }'
        )


def test_plain_items_kept():
    module = parse_item_mod(
        """
        pub mod api {
            use std::fmt;
            pub struct S { a: u8 }
            const X: [u8; 2] = [1, 2];
            fn f() -> &'static str { "}" }
        }
        """
    )
    assert module.items == (
        RustItem("use std::fmt;"),
        RustItem("pub struct S { a: u8 }"),
        RustItem("const X: [u8; 2] = [1, 2];"),
        RustItem('fn f() -> &\'static str { "}" }'),
    )
    assert module.type_substitutes() == {}


def test_comments_ignored():
    module = parse_item_mod(
        """
        // leading comment
        pub mod api { /* block { */
            #[subxt(substitute_type = "a::B")] // trailing
            use crate::B;
        }
        """
    )
    assert module.type_substitutes() == {"a::B": "crate::B"}


def test_later_substitute_wins():
    module = parse_item_mod(
        """
        pub mod api {
            #[subxt(substitute_type = "a::B")] use crate::First;
            #[subxt(substitute_type = "a::B")] use crate::Second;
        }
        """
    )
    assert module.type_substitutes() == {"a::B": "crate::Second"}
    assert len(module.items) == 2


def test_inner_attributes_recorded():
    module = parse_item_mod("#[allow(dead_code)] pub mod api { #![allow(unused)] struct S; }")
    assert module.attrs == ("#[allow(dead_code)]", "#![allow(unused)]")
    assert module.items == (RustItem("struct S;"),)


def test_unbalanced_body_rejected():
    with pytest.raises(IrError):
        parse_item_mod("pub mod api { struct S { }")


def test_item_mod_direct_construction():
    module = ItemMod(
        ident="api",
        items=(RustItem("struct S;"), TypeSubstitute("x::Y", "crate::Y")),
    )
    assert module.type_substitutes() == {"x::Y": "crate::Y"}