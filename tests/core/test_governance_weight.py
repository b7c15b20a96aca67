"""Governance Weight — weight is the effective value, independent of equity."""

import pytest

from cookgov.core.effective_value import compute_effective_value
from cookgov.core.governance_weight import compute_governance_weight, compute_team_weights
from cookgov.core.ledger_types import TeamConfig
from tests.core.helpers import NOW, entry, months_ago


def test_weight_equals_effective_value():
    config = TeamConfig(decay_rate=0.05, cap=50)
    entries = [entry("a", 100, months_ago(12)), entry("a", 20, months_ago(1))]
    weight = compute_governance_weight("a", entries, config, NOW)
    expected = compute_effective_value(entries, config, NOW)

    assert weight.weight == expected.effective_value
    assert weight.raw_value == 120
    assert weight.cap_applied is True
    assert weight.decay_applied is True


def test_team_weights_cover_every_contributor():
    weights = compute_team_weights(
        {"a": [entry("a", 10)], "b": [entry("b", 5), entry("b", 5, months_ago(2))]},
        TeamConfig(),
        NOW,
    )
    assert set(weights) == {"a", "b"}
    assert weights["b"].weight == pytest.approx(10)
