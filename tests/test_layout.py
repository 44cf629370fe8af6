import logging

from cardkit.layout import (
    LAYOUT_KIND,
    QCN26_LAYOUT_V1,
    USQC26_LAYOUT_V1,
    LayoutV1,
    deep_merge,
    parse_layout,
    resolve_layout,
    validate_layout,
)


def test_resolve_without_override_is_equal_copy():
    resolved = resolve_layout(USQC26_LAYOUT_V1)
    assert resolved == USQC26_LAYOUT_V1
    assert resolved is not USQC26_LAYOUT_V1


def test_other_kind_override_is_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        resolved = resolve_layout(
            USQC26_LAYOUT_V1,
            {"kind": "other-kind", "palette": {"primary": "#000000"}},
        )
    assert resolved == USQC26_LAYOUT_V1
    assert "other-kind" in caplog.text


def test_override_without_kind_merges():
    resolved = resolve_layout(
        USQC26_LAYOUT_V1,
        {"palette": {"primary": "#123456"}, "name": {"letterSpacing": {"lastName": 2}}},
    )
    assert resolved.kind == LAYOUT_KIND
    assert resolved.palette.primary == "#123456"
    assert resolved.palette.secondary == USQC26_LAYOUT_V1.palette.secondary
    assert resolved.name.letter_spacing.last_name == 2
    assert resolved.name.letter_spacing.first_name == USQC26_LAYOUT_V1.name.letter_spacing.first_name
    assert resolved.frame == USQC26_LAYOUT_V1.frame


def test_override_does_not_mutate_base():
    before = USQC26_LAYOUT_V1.to_wire()
    resolve_layout(USQC26_LAYOUT_V1, {"frame": {"innerRadius": 3}})
    assert USQC26_LAYOUT_V1.to_wire() == before


def test_whole_layout_override_replaces_base():
    resolved = resolve_layout(USQC26_LAYOUT_V1, QCN26_LAYOUT_V1)
    assert resolved == QCN26_LAYOUT_V1


def test_deep_merge_copies_unknown_keys_through():
    merged = deep_merge({"a": {"b": 1}}, {"a": {"z": 2}, "sparkles": True})
    assert merged == {"a": {"b": 1, "z": 2}, "sparkles": True}


def test_unknown_keys_are_ignored_by_the_schema():
    resolved = resolve_layout(USQC26_LAYOUT_V1, {"palette": {"tertiary": "#abcdef"}, "sparkles": True})
    assert resolved == USQC26_LAYOUT_V1


def test_invalid_merge_falls_back_to_base(caplog):
    with caplog.at_level(logging.WARNING):
        resolved = resolve_layout(USQC26_LAYOUT_V1, {"frame": {"innerX": "wide"}})
    assert resolved == USQC26_LAYOUT_V1
    assert "schema" in caplog.text


def test_deep_merge_replaces_non_mappings_and_skips_none():
    base = {"a": {"b": 1, "c": [1, 2]}, "d": 4}
    merged = deep_merge(base, {"a": {"c": [3], "b": None}, "d": 5})
    assert merged == {"a": {"b": 1, "c": [3]}, "d": 5}
    assert base == {"a": {"b": 1, "c": [1, 2]}, "d": 4}


def test_presets_differ_only_in_look():
    assert QCN26_LAYOUT_V1.frame.inner_radius == 0
    assert USQC26_LAYOUT_V1.frame.inner_radius == 29
    assert QCN26_LAYOUT_V1.name == USQC26_LAYOUT_V1.name
    assert QCN26_LAYOUT_V1.palette.primary != USQC26_LAYOUT_V1.palette.primary


def test_parse_layout():
    wire = USQC26_LAYOUT_V1.to_wire()
    assert isinstance(parse_layout(wire), LayoutV1)
    assert parse_layout(USQC26_LAYOUT_V1) is USQC26_LAYOUT_V1
    assert parse_layout(None) is None
    assert parse_layout({**wire, "kind": "usqc27-v2"}) is None
    assert parse_layout({"kind": LAYOUT_KIND}) is None


def test_validate_layout_reports_paths():
    assert validate_layout(USQC26_LAYOUT_V1.to_wire()) == []

    wire = USQC26_LAYOUT_V1.to_wire()
    del wire["bottomBar"]["fontSize"]
    problems = validate_layout(wire)
    assert len(problems) == 1
    assert problems[0].startswith("bottomBar.fontSize")
