from __future__ import annotations

import pytest

from checkgroups.matching import UNGROUPED, match_rule, resolve_category
from checkgroups.registry import MatchPolicy, RuleRegistry, build_registry

pytestmark = pytest.mark.unit


def _registry(policy: MatchPolicy = MatchPolicy.PARTITIONED) -> RuleRegistry:
    return build_registry(
        {
            "$schema": "./groups-schema.json",
            "i18n": {
                "title": "Internationalization",
                "children": {
                    "i18n_prefix": {
                        "type": "prefix",
                        "parent": "i18n",
                        "checks": ["WordPress.WP.I18n"],
                    },
                    "i18n_contains": {
                        "type": "contains",
                        "parent": "i18n",
                        "checks": ["Language.I18nFunctionParameters", "load_plugin_textdomain"],
                    },
                },
            },
            "generic": {
                "title": "Generic",
                "children": {
                    "generic_contains": {
                        "type": "contains",
                        "parent": "generic",
                        "checks": ["I18n"],
                    },
                },
            },
            "plugin_readme": {
                "title": "Plugin Readme",
                "children": {
                    "plugin_readme_prefix": {
                        "type": "prefix",
                        "parent": "plugin_readme",
                        "checks": ["readme_", "never_used_second_check"],
                    },
                },
            },
        },
        policy=policy,
    )


def test_prefix_rules_win_over_contains_rules() -> None:
    assert resolve_category("WordPress.WP.I18n.MissingArgDomain", _registry()) == "i18n"


def test_contains_rule_redirects_to_parent() -> None:
    assert resolve_category("Language.I18nFunctionParameters.Missing", _registry()) == "i18n"


def test_contains_rules_are_tried_in_registry_order() -> None:
    node = match_rule("Language.I18nFunctionParameters.Missing", _registry())

    assert node is not None
    assert node.id == "i18n_contains"


def test_contains_rule_later_check_matches() -> None:
    assert resolve_category("PluginCheck.load_plugin_textdomain", _registry()) == "i18n"


def test_contains_falls_through_to_later_group() -> None:
    assert resolve_category("Custom.I18nTextDomain.Missing", _registry()) == "generic"


def test_prefix_rule_uses_only_first_check() -> None:
    registry = _registry()

    assert resolve_category("readme_missing_header", registry) == "plugin_readme"
    assert resolve_category("never_used_second_check", registry) == UNGROUPED


def test_prefix_requires_start_of_code() -> None:
    assert resolve_category("Foo.readme_header", _registry()) == UNGROUPED


def test_unmatched_and_empty_codes_are_ungrouped() -> None:
    registry = _registry()

    assert resolve_category("UNKNOWN_CODE_THAT_DOES_NOT_MATCH", registry) == UNGROUPED
    assert resolve_category("", registry) == UNGROUPED
    assert match_rule("", registry) is None


def test_empty_registry_is_always_ungrouped() -> None:
    assert resolve_category("WordPress.WP.I18n.MissingArgDomain", RuleRegistry.empty()) == UNGROUPED


def test_direct_leaf_resolves_to_its_own_id() -> None:
    registry = build_registry({"security": {"type": "contains", "checks": ["Security."]}})

    assert resolve_category("WordPress.Security.NonceVerification", registry) == "security"


def test_dangling_parent_is_returned_verbatim() -> None:
    registry = build_registry(
        {"outer": {"children": {"leaf": {"type": "prefix", "parent": "ghost", "checks": ["X"]}}}}
    )

    assert resolve_category("X.Y", registry) == "ghost"


def test_prefix_rule_without_checks_never_matches() -> None:
    registry = build_registry({"outer": {"children": {"leaf": {"type": "prefix", "checks": []}}}})

    assert resolve_category("anything", registry) == UNGROUPED


def test_mixed_policy_uses_registry_order_across_strategies() -> None:
    registry = build_registry(
        {
            "contains_first": {
                "children": {"c": {"type": "contains", "checks": ["I18n"]}},
            },
            "prefix_second": {
                "children": {"p": {"type": "prefix", "checks": ["WordPress.WP.I18n"]}},
            },
        },
        policy=MatchPolicy.MIXED,
    )

    assert resolve_category("WordPress.WP.I18n.MissingArgDomain", registry) == "contains_first"


def test_mixed_policy_treats_every_check_as_substring() -> None:
    registry = _registry(MatchPolicy.MIXED)

    assert resolve_category("Foo.readme_header", registry) == "plugin_readme"
    assert resolve_category("x.never_used_second_check", registry) == "plugin_readme"


def test_partitioned_policy_with_same_config_prefers_prefix() -> None:
    code = "WordPress.WP.I18n.MissingArgDomain"
    registry = build_registry(
        {
            "contains_first": {"children": {"c": {"type": "contains", "checks": ["I18n"]}}},
            "prefix_second": {
                "children": {"p": {"type": "prefix", "checks": ["WordPress.WP.I18n"]}},
            },
        }
    )

    assert resolve_category(code, registry) == "prefix_second"
