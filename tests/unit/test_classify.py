from __future__ import annotations

import copy

import pytest

from checkgroups.grouping import classify, read_field
from checkgroups.matching import UNGROUPED
from checkgroups.registry import RuleRegistry, build_registry

pytestmark = pytest.mark.unit


def _registry() -> RuleRegistry:
    return build_registry(
        {
            "$schema": "./groups-schema.json",
            "i18n": {
                "id": "i18n",
                "title": "I18n",
                "children": {
                    "i18n_prefix": {
                        "type": "prefix",
                        "parent": "i18n",
                        "checks": ["WordPress.WP.I18n"],
                    },
                },
            },
            "plugin_readme": {
                "id": "plugin_readme",
                "title": "Plugin Readme",
                "children": {
                    "plugin_readme_contains": {
                        "type": "contains",
                        "parent": "plugin_readme",
                        "checks": ["no_license"],
                    },
                },
            },
            "security": {"title": "Security", "type": "contains", "checks": ["Security."]},
        }
    )


def test_classify_scenario_matched_and_ungrouped() -> None:
    registry = build_registry(
        {
            "i18n": {
                "title": "I18n",
                "children": {
                    "i18n_prefix": {
                        "type": "prefix",
                        "parent": "i18n",
                        "checks": ["WordPress.WP.I18n"],
                    }
                },
            }
        }
    )
    records = [{"code": "WordPress.WP.I18n.Foo"}, {"code": "Unrelated"}]

    result = classify(records, registry)

    assert result == {"i18n": [records[0]], UNGROUPED: [records[1]]}
    assert list(result) == ["i18n", UNGROUPED]


def test_classify_orders_by_configuration_not_input() -> None:
    records = [
        {"code": "Other"},
        {"code": "WordPress.Security.NonceVerification"},
        {"code": "no_license"},
        {"code": "WordPress.WP.I18n.MissingArgDomain"},
    ]

    result = classify(records, _registry())

    assert list(result) == ["i18n", "plugin_readme", "security", UNGROUPED]


def test_classify_omits_empty_buckets() -> None:
    result = classify([{"code": "no_license"}], _registry())

    assert result == {"plugin_readme": [{"code": "no_license"}]}


def test_classify_keeps_record_identity_and_input_order() -> None:
    first = {"code": "WordPress.WP.I18n.A", "line": 1}
    second = {"code": "WordPress.WP.I18n.B", "line": 2}

    result = classify([first, second], _registry())

    assert result["i18n"][0] is first
    assert result["i18n"][1] is second


def test_classify_does_not_mutate_records() -> None:
    records = [
        {"code": "WordPress.WP.I18n.A", "type": "ERROR", "message": "m"},
        {"code": "nothing", "type": "WARNING"},
    ]
    snapshot = copy.deepcopy(records)

    classify(records, _registry())

    assert records == snapshot


def test_classify_empty_input_is_empty() -> None:
    assert classify([], _registry()) == {}


def test_classify_with_empty_registry_puts_everything_in_ungrouped() -> None:
    records = [{"code": "WordPress.WP.I18n.Foo"}, {"code": "Unrelated"}]
    schema_only = build_registry({"$schema": "./groups-schema.json"})

    assert classify(records, schema_only) == {UNGROUPED: records}
    assert classify(records, RuleRegistry.empty()) == {UNGROUPED: records}
    assert classify(records, build_registry({})) == {UNGROUPED: records}
    assert classify([], schema_only) == {}


def test_classify_missing_or_non_string_code_is_ungrouped() -> None:
    records = [{"message": "no code"}, {"code": None}, {"code": 42}]

    result = classify(records, _registry())

    assert result == {UNGROUPED: records}


def test_classify_custom_code_field() -> None:
    records = [{"sniff": "WordPress.WP.I18n.A", "code": "no_license"}]

    result = classify(records, _registry(), code_field="sniff")

    assert list(result) == ["i18n"]


def test_classify_emits_dangling_parent_bucket_before_ungrouped() -> None:
    registry = build_registry(
        {
            "known": {"children": {"k": {"type": "prefix", "checks": ["K"]}}},
            "outer": {"children": {"leaf": {"type": "prefix", "parent": "ghost", "checks": ["G"]}}},
        }
    )
    records = [{"code": "nothing"}, {"code": "G.1"}, {"code": "K.1"}]

    result = classify(records, registry)

    assert list(result) == ["known", "ghost", UNGROUPED]
    assert sum(len(members) for members in result.values()) == len(records)


def test_read_field_defaults() -> None:
    assert read_field({"code": "abc"}, "code") == "abc"
    assert read_field({"code": 1}, "code") == ""
    assert read_field({}, "code") == ""
    assert read_field("not-a-mapping", "code") == ""
