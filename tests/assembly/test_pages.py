"""Tests for page tree assembly and section rendering."""

from __future__ import annotations

from funcdocs.assembly.backlinks import build_backlinks
from funcdocs.assembly.pages import DocTree, PageAssembler, PageRenderer, format_link
from funcdocs.assembly.references import ReferenceResolver
from funcdocs.assembly.registry import build_registry
from tests._fixtures.docs_builder import code_fragment, static_fragment


def _assemble(*fragments, renderer=None) -> DocTree:
    registry = build_registry(fragments)
    bodies = ReferenceResolver(registry, fragments).resolve_all(fragments)
    backlinks = build_backlinks(bodies, registry)
    return PageAssembler(registry, backlinks, renderer).assemble(fragments, bodies)


def test_building_blocks_section() -> None:
    cart = code_fragment("app.Cart", "Shop / Cart", "Holds items.")
    orders = code_fragment("app.Orders", "Shop / Orders", "Places orders.", uses=("app.Cart", "app.Missing"))

    page = _assemble(cart, orders).get("shop/orders.md")

    assert page is not None
    assert page.startswith("# Orders\n\nSource: `app.Orders`\n{:.page-subtitle}\n\nPlaces orders.\n\n")
    assert (
        "## Building Blocks Used\n\n"
        "This functionality is composed of the following reusable components:\n\n"
        "* [Shop / Cart](./cart/)\n"
        "* app.Missing (Not documented)\n\n"
        "### Composition Graph\n"
    ) in page
    assert '    app-orders["Shop / Orders"];\n' in page
    assert '    app-orders --> app-cart["Shop / Cart"];\n' in page
    assert '    app-orders --> app-missing["app.Missing"];\n' in page
    assert "    style app-orders fill:#ffe7cd,stroke:#b38000,stroke-width:4px\n" in page
    assert '    click app-cart "./cart/" "View documentation for app.Cart"\n' in page
    assert "click app-missing" not in page
    assert page.endswith("```\n")


def test_sections_follow_a_fixed_order() -> None:
    base = code_fragment("app.Base", "Shop / Base")
    orders = code_fragment("app.Orders", "Shop / Orders", "Uses [@ref:app.Cart].", uses=("app.Cart",))
    cart = code_fragment(
        "app.Cart",
        "Shop / Cart",
        links=("https://example.com Shop docs",),
        uses=("app.Base",),
    )

    page = _assemble(base, cart, orders).get("shop/cart.md")

    assert page is not None
    headings = [line for line in page.split("\n") if line.startswith("## ")]
    assert headings == [
        "## Building Blocks Used",
        "## Used By Building Blocks",
        "## Referenced by",
        "## Further reading",
    ]
    assert '    app-orders["Shop / Orders"] --> app-cart;' in page
    assert '    app-orders["Shop / Orders"] -.-> app-cart;' in page
    assert page.endswith("## Further reading\n\n* [Shop docs](https://example.com)\n")


def test_static_page_gets_a_heading_when_missing() -> None:
    guide = static_fragment("guides:notes.md", "Guides / Notes", "Some notes.")
    titled = static_fragment("guides:intro.md", "Guides / Intro", "# Welcome\n\nHello.")

    tree = _assemble(guide, titled)

    assert tree.get("Guides/notes.md") == "# Notes\n\nSome notes.\n"
    assert tree.get("Guides/intro.md") == "# Welcome\n\nHello.\n"


def test_custom_templates_override_defaults(tmp_path) -> None:
    (tmp_path / "further_reading.md.j2").write_text("## Links\n{% for link in links %}\n- {{ link }}\n{% endfor %}\n")
    page = code_fragment("app.Page", "Docs / Page", links=("https://example.com",))

    tree = _assemble(page, renderer=PageRenderer(tmp_path))

    assert tree.get("docs/page.md").endswith("## Links\n- [https://example.com](https://example.com)\n")


def test_doc_tree_iterates_pages() -> None:
    tree = DocTree()
    tree.add("a/b/c.md", "C")
    tree.add("top.md", "T")

    assert tree.get("a/b/c.md") == "C"
    assert tree.get("a/missing.md") is None
    assert sorted(tree.iter_pages()) == [("a/b/c.md", "C"), ("top.md", "T")]
    assert len(tree) == 2


def test_format_link() -> None:
    assert format_link("[Docs](https://example.com)") == "[Docs](https://example.com)"
    assert format_link("https://example.com  Example Site") == "[Example Site](https://example.com)"
    assert format_link(" https://example.com ") == "[https://example.com](https://example.com)"
