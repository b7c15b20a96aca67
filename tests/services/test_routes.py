"""HTTP Routes — the governance API through the FastAPI test client.

Invariants:
    - Domain errors render as {"error": {code, message, category, severity, ...}}
    - Body validation failures return 400 with field-level details
    - Create endpoints return 201; routes return the persisted state

Design Decisions:
    - Routes run on the real clock, so flows here use fresh contributions only
"""

import pytest


@pytest.fixture
async def http_team(client):
    """Team with alice (100 COOK) and bob (40 COOK) recorded over HTTP."""
    res = await client.put("/api/v1/teams/kitchen", json={"name": "Kitchen"})
    assert res.status_code == 200
    for contributor_id, value in (("alice", 100), ("bob", 40)):
        res = await client.post(
            "/api/v1/teams/kitchen/contributions",
            json={"contributor_id": contributor_id, "value": value},
        )
        assert res.status_code == 201
    return "kitchen"


async def test_health(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_team_upsert_resolves_defaults(client):
    """Unset config fields come back as Settings defaults."""
    res = await client.put(
        "/api/v1/teams/kitchen", json={"config": {"cap": 80, "decay_rate": 0.1}},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "kitchen"
    assert body["config"]["cap"] == 80
    assert body["config"]["decay_rate"] == 0.1
    assert body["config"]["constitutional_approval_threshold"] == 66

    res = await client.get("/api/v1/teams/kitchen")
    assert res.json()["config"]["cap"] == 80


async def test_unknown_team_returns_404_error_shape(client):
    res = await client.get("/api/v1/teams/missing")
    assert res.status_code == 404
    error = res.json()["error"]
    assert error["code"] == "RESOURCE_NOT_FOUND"
    assert error["category"] == "resource_not_found"
    assert error["context"]["entity_id"] == "missing"


async def test_invalid_body_returns_400_details(client, http_team):
    res = await client.post(
        f"/api/v1/teams/{http_team}/contributions",
        json={"contributor_id": "alice", "value": -5},
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(d["field"] == "body.value" for d in error["details"])


async def test_contributions_and_weights(client, http_team):
    res = await client.get(f"/api/v1/teams/{http_team}/contributions")
    assert len(res.json()) == 2

    res = await client.get(f"/api/v1/teams/{http_team}/governance-weights")
    weights = {w["contributor_id"]: w["weight"] for w in res.json()}
    assert weights == pytest.approx({"alice": 100.0, "bob": 40.0})

    res = await client.get(f"/api/v1/teams/{http_team}/equity")
    equity = {e["contributor_id"]: e["equity"] for e in res.json()}
    assert sum(equity.values()) == pytest.approx(100.0)
    assert equity["alice"] == pytest.approx(100 / 140 * 100)


async def test_committee_selection_and_verification(client, http_team):
    res = await client.get(f"/api/v1/teams/{http_team}/committees/eligibility")
    assert {r["contributor_id"] for r in res.json() if r["is_eligible"]} == {"alice", "bob"}

    res = await client.post(
        f"/api/v1/teams/{http_team}/committees",
        json={"committee_name": "Menu", "seats": 1, "created_by": "alice", "seed": "menu-2026"},
    )
    assert res.status_code == 201
    selection = res.json()
    assert selection["seed"] == "menu-2026"
    assert len(selection["selected_members"]) == 1

    res = await client.get(f"/api/v1/committees/{selection['committee_id']}/verification")
    assert res.json()["verified"] is True

    res = await client.get(
        f"/api/v1/teams/{http_team}/service-terms",
        params={"committee_id": selection["committee_id"]},
    )
    terms = res.json()
    assert [t["contributor_id"] for t in terms] == selection["selected_members"]
    assert terms[0]["status"] == "active"


async def test_proposal_flow_over_http(client, http_team):
    """Objection crosses threshold 0, voting opens, alice's weight carries it."""
    res = await client.post(
        f"/api/v1/teams/{http_team}/proposals",
        json={"type": "binding_decision", "title": "Buy a new oven", "proposed_by": "alice"},
    )
    assert res.status_code == 201
    proposal_id = res.json()["id"]

    res = await client.post(
        f"/api/v1/proposals/{proposal_id}/submit", json={"objection_threshold": 0},
    )
    assert res.json()["status"] == "objection_window_open"

    res = await client.post(
        f"/api/v1/proposals/{proposal_id}/objections", json={"objector_id": "bob"},
    )
    assert res.status_code == 201
    proposal = res.json()
    assert proposal["status"] == "voting_triggered"
    voting_id = proposal["voting_id"]

    res = await client.post(
        f"/api/v1/proposals/{proposal_id}/objections", json={"objector_id": "carol"},
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "STATE_CONFLICT"

    for voter_id, option in (("alice", "approve"), ("bob", "reject")):
        res = await client.post(
            f"/api/v1/votings/{voting_id}/votes",
            json={"voter_id": voter_id, "option": option},
        )
        assert res.status_code == 201

    res = await client.post(f"/api/v1/votings/{voting_id}/close", json={})
    assert res.json()["status"] == "closed"
    res = await client.post(f"/api/v1/votings/{voting_id}/tally", json={"actor_id": "alice"})
    assert res.json()["winning_option"] == "approve"

    res = await client.get(f"/api/v1/proposals/{proposal_id}")
    assert res.json()["status"] == "approved"


async def test_audit_log_lists_newest_first(client, http_team):
    res = await client.get(f"/api/v1/teams/{http_team}/audit-logs")
    assert res.status_code == 200
    entries = res.json()
    assert entries
    timestamps = [e["timestamp"] for e in entries]
    assert timestamps == sorted(timestamps, reverse=True)

    res = await client.get(
        f"/api/v1/teams/{http_team}/audit-logs",
        params={"action_type": "contribution_recorded"},
    )
    assert len(res.json()) == 2
    assert all(e["action_type"] == "contribution_recorded" for e in res.json())


async def test_audit_logs_cannot_be_changed(client, http_team):
    """The audit trail has no update or delete route."""
    base = f"/api/v1/teams/{http_team}/audit-logs"
    entry_id = (await client.get(base)).json()[0]["id"]

    assert (await client.put(base, json={})).status_code == 405
    assert (await client.patch(base, json={})).status_code == 405
    assert (await client.delete(base)).status_code == 405
    for method in ("PUT", "PATCH", "DELETE"):
        res = await client.request(method, f"{base}/{entry_id}")
        assert res.status_code in (404, 405)

    assert len((await client.get(base)).json()) >= 1
