"""Team Service — team creation, config updates and the recompute they trigger.

Tests cover:
    - upsert creates then updates, leaving unset fields untouched
    - Invalid configuration raises ValidationError and leaves nothing staged in the session
    - Changing the cap recomputes stored weights and equity
    - Changing a non-value field does not recompute
"""

import pytest
from sqlalchemy import select

from cookgov.core.domain_types import EquityModel
from cookgov.core.errors import NotFoundError, ValidationError
from cookgov.models.equity_record import EquityRecord
from cookgov.models.governance_weight_record import GovernanceWeightRecord
from cookgov.models.team import Team
from cookgov.services.team_service import TeamService


async def test_upsert_creates_then_updates(test_db, clock):
    service = TeamService(test_db, clock)
    team = await service.upsert_team("t-1", config={"objection_window_days": 3})
    assert team.name == "t-1"
    assert team.objection_window_days == 3

    team = await service.upsert_team("t-1", name="Bakery", config={"cap": 200})
    assert team.name == "Bakery"
    assert team.cap == 200
    assert team.objection_window_days == 3

    config = await service.get_config("t-1")
    assert config.cap == 200
    assert config.equity_model == EquityModel.SLICING
    assert config.approval_threshold == 50


async def test_invalid_config_rejected(test_db, clock):
    service = TeamService(test_db, clock)
    with pytest.raises(ValidationError):
        await service.upsert_team("t-1", config={"decay_rate": 1.5})


async def test_invalid_update_is_not_committed_later(test_db, clock, team):
    service = TeamService(test_db, clock)
    with pytest.raises(ValidationError):
        await service.upsert_team("team-1", config={"cap": 10, "decay_rate": 1.5})

    await service.upsert_team("team-1", config={"voting_period_days": 9})

    config = await service.get_config("team-1")
    assert config.cap is None
    assert config.decay_rate is None
    assert config.voting_period_days == 9


async def test_invalid_new_team_is_not_staged(test_db, clock):
    with pytest.raises(ValidationError):
        await TeamService(test_db, clock).upsert_team("t-bad", config={"decay_rate": -1})

    await test_db.commit()
    assert await test_db.get(Team, "t-bad") is None


async def test_unknown_team(test_db, clock):
    with pytest.raises(NotFoundError):
        await TeamService(test_db, clock).get_team("nope")


async def test_cap_change_recomputes(test_db, clock, seed_ledger, test_session_factory):
    service = TeamService(test_db, clock)
    await service.upsert_team("team-1", config={"cap": 60})

    assert service.last_recompute
    assert all(o.succeeded for o in service.last_recompute)

    async with test_session_factory() as fresh:
        weights = await fresh.execute(
            select(GovernanceWeightRecord).where(GovernanceWeightRecord.team_id == "team-1"),
        )
        by_id = {w.contributor_id: w for w in weights.scalars()}
        assert by_id["alice"].weight == pytest.approx(60.0)
        assert by_id["alice"].cap_applied is True
        assert by_id["bob"].weight == pytest.approx(50.0)

        equity = await fresh.execute(
            select(EquityRecord).where(EquityRecord.team_id == "team-1"),
        )
        shares = {e.contributor_id: e.equity for e in equity.scalars()}
        assert shares["alice"] == pytest.approx(60 / 140 * 100)
        assert sum(shares.values()) == pytest.approx(100.0)


async def test_non_value_change_skips_recompute(test_db, clock, seed_ledger):
    service = TeamService(test_db, clock)
    await service.upsert_team("team-1", config={"voting_period_days": 10})
    assert service.last_recompute == []
