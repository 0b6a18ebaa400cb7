# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for stylesheet class and id extraction."""

from classmask.extractor import (
    extract_class_names,
    extract_id_names,
    is_identifier,
    iter_selector_tokens,
    leading_selector_token,
    merge_ordered,
)


def test_ext_001_extracts_classes_in_first_occurrence_order() -> None:
    css = ".hero{color:red}.hero-title{color:blue}.hero .card:hover{}"

    assert extract_class_names(css) == ["hero", "hero-title", "card"]


def test_ext_002_skips_comments_and_strings() -> None:
    css = '/* .ghost{} */ .real{content:".fake"} a[title=".quoted"]{}'

    assert extract_class_names(css) == ["real"]


def test_ext_003_ignores_declaration_values() -> None:
    css = ".box{margin:.5em;width:calc(100% - .25rem);background:url(img/a.b.png)}"

    assert extract_class_names(css) == ["box"]


def test_ext_004_scans_nested_blocks_but_not_at_rule_preludes() -> None:
    css = (
        "@import url(theme.min.css);\n"
        "@media (min-width: 40em) { .grid { display: grid } }\n"
        "@supports (display: grid) { .cols .col { float: none } }\n"
        ".card { color: red; .title { font-weight: bold } }\n"
    )

    assert extract_class_names(css) == ["grid", "cols", "col", "card", "title"]


def test_ext_005_decodes_escaped_identifiers() -> None:
    css = r".md\:flex{display:flex} .\31 0col{} .w-1\/2{}"

    assert extract_class_names(css) == ["md:flex", "10col", "w-1/2"]


def test_ext_006_rejects_names_that_are_not_identifiers() -> None:
    css = ".5col{} .-2x{} .ok{}"

    assert extract_class_names(css) == ["ok"]


def test_ext_007_selector_lists_and_pseudo_arguments() -> None:
    css = ".a, .b > .c ~ .d:not(.e){}"

    assert extract_class_names(css) == ["a", "b", "c", "d", "e"]


def test_ext_008_extracts_ids_separately_from_hex_colors() -> None:
    css = "#main .nav{color:#fff} #side{}"

    assert extract_id_names(css) == ["main", "side"]
    assert extract_class_names(css) == ["nav"]


def test_ext_009_tokens_carry_marker_spans() -> None:
    css = "div .ab{}"

    tokens = list(iter_selector_tokens(css))

    assert len(tokens) == 1
    token = tokens[0]
    assert (token.marker, token.name) == (".", "ab")
    assert css[token.start : token.end] == ".ab"


def test_ext_010_merge_keeps_file_order_then_first_occurrence() -> None:
    merged = merge_ordered([["b", "a"], ["a", "c"], [], ["d", "b"]])

    assert merged == ["b", "a", "c", "d"]


def test_ext_011_identifier_check() -> None:
    assert is_identifier("a1")
    assert is_identifier("_x")
    assert is_identifier("-x")
    assert not is_identifier("")
    assert not is_identifier("1a")
    assert not is_identifier("-1")
    assert not is_identifier("md:flex")


def test_ext_012_spans_stay_exact_across_crlf_lines_and_comments() -> None:
    css = "/* header\r\n   .ghost */\r\n.nav\r\n{}\r\n.w-1\\/2/* x */,#top{}"

    tokens = list(iter_selector_tokens(css))

    assert [css[token.start : token.end] for token in tokens] == [
        ".nav",
        ".w-1\\/2",
        "#top",
    ]
    assert [token.name for token in tokens] == ["nav", "w-1/2", "top"]


def test_ext_013_leading_selector_token() -> None:
    token = leading_selector_token(".btn > span")

    assert token is not None
    assert (token.marker, token.name, token.start, token.end) == (".", "btn", 0, 4)
    assert leading_selector_token("#main") is not None
    assert leading_selector_token("div.btn") is None
    assert leading_selector_token(". btn") is None
    assert leading_selector_token("") is None
