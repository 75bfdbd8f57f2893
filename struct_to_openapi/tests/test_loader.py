from __future__ import annotations

from pathlib import Path

import pytest

from struct_to_openapi.pipeline.declarations import (
    ArrayOf,
    Foreign,
    GoSourceLoader,
    MapOf,
    NamedReference,
    PointerTo,
    Primitive,
    parse_type_expr,
)
from struct_to_openapi.pipeline.errors import LoadError

PETSTORE_DIR = Path(__file__).parent / "test_data" / "petstore"


def load(text):
    return GoSourceLoader().load_source(text, "models.go")


class TestParseTypeExpr:
    """Go type expression parsing"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("int64", Primitive("int64")),
            ("string", Primitive("string")),
            ("Pet", NamedReference("Pet")),
            ("*Pet", PointerTo(NamedReference("Pet"))),
            ("[]string", ArrayOf(Primitive("string"))),
            ("[]*Pet", ArrayOf(PointerTo(NamedReference("Pet")))),
            ("[4]byte", ArrayOf(Primitive("byte"))),
            ("map[string][]int", MapOf(Primitive("string"), ArrayOf(Primitive("int")))),
            ("time.Time", Foreign("time", "Time")),
            ("*json.RawMessage", PointerTo(Foreign("json", "RawMessage"))),
            ("interface{}", Primitive("any")),
            ("struct {", Foreign("", "struct")),
            ("chan int", Foreign("", "chan")),
            ("func() error", Foreign("", "func")),
            ("Page[Pet]", NamedReference("Page")),
        ],
    )
    def test_type_expressions(self, text, expected):
        assert parse_type_expr(text) == expected

    def test_qualified_name(self):
        assert Foreign("time", "Time").qualified_name == "time.Time"
        assert Foreign("", "chan").qualified_name == "chan"


class TestGoSourceLoader:
    """Declaration scanning from Go source text"""

    def test_annotated_struct(self):
        source = load(
            """package models

// Item is something for sale.
// oapi:schema
type Item struct {
	ID    int64  `json:"id"`
	// oapi_description: display name
	Name  string `json:"name,omitempty"`
	Price float64
}
"""
        )
        assert len(source.declarations) == 1
        item = source.declarations[0]
        assert item.name == "Item"
        assert item.package == "models"
        assert item.is_object_like
        assert item.doc == "Item is something for sale.\noapi:schema"
        assert item.line == 5

        assert [f.name for f in item.fields] == ["ID", "Name", "Price"]
        assert item.fields[0].tag == 'json:"id"'
        assert item.fields[1].doc == "oapi_description: display name"
        assert item.fields[1].tag == 'json:"name,omitempty"'
        assert item.fields[2].tag == ""
        assert item.fields[2].type_expr == Primitive("float64")

    def test_swagger_model_decoration(self):
        source = load(
            """package models

// swagger:model
type Legacy struct {
	Value string
}
"""
        )
        assert [d.name for d in source.declarations] == ["Legacy"]

    def test_custom_decorations(self):
        text = """package models

// api:public
type Public struct{}

// oapi:schema
type Internal struct{}
"""
        source = GoSourceLoader(["api:public"]).load_source(text)
        assert [d.name for d in source.declarations] == ["Public"]
        assert source.declarations[0].fields == ()

    def test_unannotated_declarations_are_bound_but_not_listed(self):
        source = load(
            """package models

// oapi:schema
type Order struct {
	Lines []Line
}

type Line struct {
	Qty int
}
"""
        )
        assert [d.name for d in source.declarations] == ["Order"]
        assert set(source.bindings["models"]) == {"Order", "Line"}

    def test_blank_line_detaches_doc_comment(self):
        source = load(
            """package models

// oapi:schema

type Detached struct{}
"""
        )
        assert source.declarations == []

    def test_type_group(self):
        source = load(
            """package models

// oapi:schema
type (
	First struct {
		A string
	}

	// Second has its own doc.
	Second struct {
		B string
	}
)
"""
        )
        first, second = source.declarations
        assert first.name == "First"
        assert second.name == "Second"
        assert second.doc == "oapi:schema\nSecond has its own doc."

    def test_alias_declaration(self):
        source = load(
            """package models

// oapi:schema
// oapi_enum: red, green
type Colour string

// oapi:schema
type Ids = []int64
"""
        )
        colour, ids = source.declarations
        assert not colour.is_object_like
        assert colour.underlying == Primitive("string")
        assert ids.underlying == ArrayOf(Primitive("int64"))

    def test_embedded_and_multi_name_fields(self):
        source = load(
            """package models

// oapi:schema
type Shape struct {
	Base
	*Named `json:"named"`
	X, Y float64 `json:"-"`
}
"""
        )
        fields = source.declarations[0].fields
        assert fields[0].is_embedded
        assert fields[0].type_expr == NamedReference("Base")
        assert fields[0].display_name == "Base"
        assert fields[1].is_embedded
        assert fields[1].type_expr == PointerTo(NamedReference("Named"))
        assert fields[1].tag == 'json:"named"'
        assert [(f.name, f.tag) for f in fields[2:]] == [("X", 'json:"-"'), ("Y", 'json:"-"')]

    def test_multi_line_inline_struct(self):
        source = load(
            """package models

// oapi:schema
type Envelope struct {
	Meta struct {
		Count int `json:"count"`
	} `json:"meta"`
	Body string `json:"body"`
}
"""
        )
        meta, body = source.declarations[0].fields
        assert meta.name == "Meta"
        assert meta.type_expr == Foreign("", "struct")
        assert meta.tag == 'json:"meta"'
        assert body.name == "Body"

    def test_quoted_tag(self):
        source = load(
            """package models

// oapi:schema
type Quoted struct {
	Name string "json:\\"name\\""
}
"""
        )
        assert source.declarations[0].fields[0].tag == 'json:"name"'

    def test_braces_inside_literals_and_comments(self):
        source = load(
            """package models

var braces = "{{{"

/* type Hidden struct { */

func f() {
	_ = '}'
	_ = `}
	}`
}

// oapi:schema
type Visible struct {
	Pattern string `oapi_pattern:"{x}"`
}
"""
        )
        assert [d.name for d in source.declarations] == ["Visible"]
        assert source.declarations[0].fields[0].tag == 'oapi_pattern:"{x}"'

    def test_block_comment_opener_inside_string(self):
        source = load(
            """package models

const StaticGlob = "/static/*"

// oapi:schema
type Pet struct {
	Name string
}

/* trailing note */
"""
        )
        assert [d.name for d in source.declarations] == ["Pet"]
        assert [f.name for f in source.declarations[0].fields] == ["Name"]

    def test_block_comment_opener_inside_line_comment(self):
        source = load(
            """package models

// Routes are mounted under /api/*

// oapi:schema
type Owner struct {
	Email string `json:"email"`
}

/* see routes.go */
"""
        )
        assert [d.name for d in source.declarations] == ["Owner"]
        assert source.declarations[0].fields[0].tag == 'json:"email"'

    def test_block_comment_spanning_lines(self):
        source = load(
            """package models

/*
// oapi:schema
type Hidden struct {
	A string
}
*/

// oapi:schema
type Shown struct {
	B string
}
"""
        )
        assert [d.name for d in source.declarations] == ["Shown"]
        assert [f.name for f in source.declarations[0].fields] == ["B"]

    def test_interface_declaration_is_skipped_as_alias(self):
        source = load(
            """package models

type Animal interface {
	Sound() string
}

// oapi:schema
type Zoo struct {
	Animals []Animal
}
"""
        )
        assert [d.name for d in source.declarations] == ["Zoo"]
        assert source.bindings["models"]["Animal"].underlying == Primitive("any")

    def test_missing_package_clause(self):
        with pytest.raises(LoadError, match="missing package clause"):
            load("type A struct{}\n")

    def test_unbalanced_braces(self):
        with pytest.raises(LoadError, match="unbalanced braces"):
            load("package models\n\n// oapi:schema\ntype A struct {\n\tX int\n")


class TestLoadPaths:
    """Loading files and package directories"""

    def test_directory_skips_test_files(self):
        source = GoSourceLoader().load([PETSTORE_DIR])
        assert [d.name for d in source.declarations] == ["Owner", "Pet", "Kind"]
        assert "Address" in source.bindings["petstore"]
        assert "TestOnly" not in source.bindings["petstore"]

    def test_explicit_file(self):
        source = GoSourceLoader().load([PETSTORE_DIR / "pets_test.go"])
        assert [d.name for d in source.declarations] == ["TestOnly"]
        assert source.declarations[0].source_path.endswith("pets_test.go")

    def test_missing_path(self, tmp_path):
        with pytest.raises(LoadError, match="Path not found"):
            GoSourceLoader().load([tmp_path / "nope.go"])

    def test_directory_without_go_files(self, tmp_path):
        with pytest.raises(LoadError, match="No Go files"):
            GoSourceLoader().load([tmp_path])

    def test_files_share_package_bindings(self, tmp_path):
        (tmp_path / "a.go").write_text("package shop\n\n// oapi:schema\ntype Cart struct {\n\tItems []Entry\n}\n")
        (tmp_path / "b.go").write_text("package shop\n\ntype Entry struct {\n\tSku string\n}\n")
        source = GoSourceLoader().load([tmp_path])
        assert [d.name for d in source.declarations] == ["Cart"]
        assert set(source.bindings["shop"]) == {"Cart", "Entry"}
