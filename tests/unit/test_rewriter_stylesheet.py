# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for stylesheet rewriting."""

from classmask.rewriters import rewrite_stylesheet


def test_css_001_rewrites_mapped_selectors() -> None:
    result = rewrite_stylesheet(
        ".hero{color:red}.hero-title{color:blue}",
        {"hero": "a1", "hero-title": "a2"},
    )

    assert result.text == ".a1{color:red}.a2{color:blue}"
    assert result.replacements == 2
    assert result.changed


def test_css_002_short_name_never_rewritten_inside_longer_name() -> None:
    result = rewrite_stylesheet(".btn{}.btn-primary{}.btn.btn-primary{}", {"btn": "a1"})

    assert result.text == ".a1{}.btn-primary{}.a1.btn-primary{}"


def test_css_003_unmapped_text_is_returned_unchanged() -> None:
    css = "/* .hero */\r\n.card  {  color : red }\r\n"

    result = rewrite_stylesheet(css, {"hero": "a1"})

    assert result.text == css
    assert not result.changed


def test_css_004_comments_strings_and_values_are_preserved() -> None:
    css = '/* .btn */.btn{content:".btn";margin:.5em}'

    result = rewrite_stylesheet(css, {"btn": "a1"})

    assert result.text == '/* .btn */.a1{content:".btn";margin:.5em}'


def test_css_005_escaped_names_are_replaced_whole() -> None:
    result = rewrite_stylesheet(r".md\:flex:hover{display:flex}", {"md:flex": "a1"})

    assert result.text == ".a1:hover{display:flex}"


def test_css_006_ids_rewritten_only_when_mapping_given() -> None:
    css = "#main .nav{color:#fff}"

    assert rewrite_stylesheet(css, {"nav": "a1"}).text == "#main .a1{color:#fff}"
    assert (
        rewrite_stylesheet(css, {"nav": "a1"}, {"main": "b1"}).text
        == "#b1 .a1{color:#fff}"
    )


def test_css_007_nested_media_blocks_are_rewritten() -> None:
    css = "@media (max-width: 600px){.grid{display:block}}"

    result = rewrite_stylesheet(css, {"grid": "a1"})

    assert result.text == "@media (max-width: 600px){.a1{display:block}}"


def test_css_008_multiline_sources_keep_surrounding_bytes() -> None:
    css = '@charset "utf-8";\r\n.hero,\r\n  .card:hover /* .hero */ {\r\n  content: ".hero";\r\n}\r\n'

    result = rewrite_stylesheet(css, {"hero": "a1", "card": "a2"})

    assert result.text == (
        '@charset "utf-8";\r\n.a1,\r\n  .a2:hover /* .hero */ {\r\n  content: ".hero";\r\n}\r\n'
    )
    assert result.replacements == 2
