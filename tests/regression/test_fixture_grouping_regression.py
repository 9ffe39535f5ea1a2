from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from checkgroups.cli import main as cli_main
from checkgroups.config import ClassifierSettings
from checkgroups.engine import Classifier
from checkgroups.registry import MatchPolicy

pytestmark = pytest.mark.regression

runner = CliRunner()


def _tests_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _golden() -> dict[str, object]:
    path = _tests_root() / "regression/fixtures/fixture_grouping_golden_v1.json"
    return json.loads(path.read_text(encoding="utf-8"))


def _records() -> list[dict[str, object]]:
    path = _tests_root() / "fixtures/records.json"
    return json.loads(path.read_text(encoding="utf-8"))


def test_golden_fixture_header_is_stable() -> None:
    golden = _golden()

    assert golden["schema_version"] == 1
    assert golden["fixture_id"] == "reg-fixture-grouping-v1"


@pytest.mark.parametrize("policy", [MatchPolicy.PARTITIONED, MatchPolicy.MIXED])
def test_classify_matches_golden_layout(policy: MatchPolicy) -> None:
    records = _records()
    classifier = Classifier.from_file(
        _tests_root() / "fixtures/groups.json",
        settings=ClassifierSettings(match_policy=policy),
    )

    result = classifier.classify(records)

    expected = _golden()["classify"][policy.value]
    observed = [
        [category_id, [records.index(item) for item in members]]
        for category_id, members in result.items()
    ]
    assert observed == expected


def test_group_by_type_matches_golden_layout() -> None:
    records = _records()
    classifier = Classifier.from_file(_tests_root() / "fixtures/groups.json")

    grouping = classifier.group_by_type(records)

    observed = [
        [
            category.name,
            {
                bucket.value: [records.index(item) for item in members]
                for bucket, members in category.types.items()
            },
        ]
        for category in grouping.categories
    ]
    assert observed == _golden()["group_by_type"]


def test_classify_text_mode_grammar_is_backward_compatible() -> None:
    result = runner.invoke(
        cli_main.app,
        [
            "classify",
            str(_tests_root() / "fixtures/groups.json"),
            str(_tests_root() / "fixtures/records.json"),
        ],
    )

    assert result.exit_code == 0
    assert result.stdout.splitlines() == _golden()["classify_text"]
