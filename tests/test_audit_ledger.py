from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from core.domain import AuditAction, Impact
from core.events.domain_events import domain_events
from core.services.audit import AuditFilter, classify_impact, derive_action_type


@pytest.mark.parametrize(
    ("label", "impact"),
    [
        ('Created project "Checkout"', Impact.HIGH),
        ('Updated permissions for "Checkout"', Impact.MEDIUM),
        ('Approved access request for "Checkout"', Impact.MEDIUM),
        ("Denied access request", Impact.MEDIUM),
        ("Assigned member", Impact.LOW),
        ('Created project "Approved Things"', Impact.HIGH),
    ],
)
def test_impact_classification_first_match_wins(label, impact):
    assert classify_impact(label) == impact


def test_action_type_drops_target_names():
    assert derive_action_type('Updated permissions for "Checkout"') == "Updated permissions"
    assert derive_action_type('Created project "Checkout"') == "Created project"
    assert derive_action_type("Assigned member") == "Assigned member"


def test_append_without_actor_is_attributed_to_system(services):
    audit = services["audit_service"]

    entry = audit.append(None, "Nightly sync", "Synced 12 test cases.")

    assert entry.actor_display_name == "System"
    assert entry.actor_email is None
    assert entry.impact == Impact.LOW
    assert entry.occurred_at.tzinfo is not None


def test_structured_kind_overrides_label_heuristics(services, admin):
    audit = services["audit_service"]

    entry = audit.append(
        admin,
        'Changed settings of "Approved Flows"',
        "Renamed pipeline.",
        kind=AuditAction.MEMBER_ADD,
    )

    assert entry.impact == Impact.LOW
    assert entry.action_type == "member.add"
    assert entry.actor_name == admin.name
    assert entry.actor_user_id == admin.id


def test_ledger_is_newest_first_and_append_only(services, admin):
    audit = services["audit_service"]
    start = audit.count()

    first = audit.append(admin, "Step one", "a")
    second = audit.append(admin, "Step two", "b")
    third = audit.append(admin, "Step three", "c")

    entries = audit.query()
    assert audit.count() == start + 3
    assert [e.id for e in entries[:3]] == [third.id, second.id, first.id]
    assert entries[2] == first
    assert not hasattr(audit, "update")
    assert not hasattr(audit, "delete")


def test_query_with_inverted_date_range_is_empty(services, admin):
    audit = services["audit_service"]
    audit.append(admin, "Something", "x")

    assert audit.query(AuditFilter(date_from=date(2026, 5, 2), date_to=date(2026, 5, 1))) == []


def test_date_bounds_cover_whole_days(services, admin):
    audit = services["audit_service"]
    entry = audit.append(admin, "Today", "x")
    today = entry.occurred_at.date()

    found = audit.query(AuditFilter(date_from=today, date_to=today))
    assert entry.id in [e.id for e in found]

    tomorrow = today + timedelta(days=1)
    assert audit.query(AuditFilter(date_from=tomorrow)) == []

    later = datetime.now(timezone.utc) + timedelta(hours=1)
    assert entry.id in [e.id for e in audit.query(AuditFilter(date_to=later))]


def test_filters_combine_with_and_semantics(services, admin, make_user):
    audit = services["audit_service"]
    alice = make_user("Alice Tester")

    a = audit.append(admin, 'Updated permissions for "P1"', "x", project_id="p1")
    audit.append(alice, 'Updated permissions for "P1"', "y", project_id="p1")
    audit.append(admin, "Assigned member", "z", project_id="p2")

    by_actor_and_project = audit.query(AuditFilter(actor_ids=[admin.id], project_ids=["p1"]))
    assert [e.id for e in by_actor_and_project] == [a.id]

    by_type = audit.query(AuditFilter(action_types=["Updated permissions"]))
    assert len(by_type) == 2
    assert {e.impact for e in by_type} == {Impact.MEDIUM}

    assert audit.query(AuditFilter(actor_ids=[], project_ids=["p1"])) == []


def test_list_recent_and_action_types(services, admin):
    audit = services["audit_service"]
    for n in range(5):
        audit.append(admin, "Assigned member", f"#{n}", project_id="p9")

    recent = audit.list_recent(limit=3, project_id="p9")

    assert [e.details for e in recent] == ["#4", "#3", "#2"]
    assert "Assigned member" in audit.action_types()


def test_append_emits_audit_appended_after_commit(services, admin):
    audit = services["audit_service"]
    seen: list[str] = []

    def _on_appended(entry_id: str) -> None:
        seen.append(entry_id)

    domain_events.audit_appended.connect(_on_appended)
    try:
        entry = audit.append(admin, "Observed", "x")
    finally:
        domain_events.audit_appended.disconnect(_on_appended)

    assert seen == [entry.id]


def test_failed_commit_rolls_back_the_appended_entry(services, session, admin, monkeypatch):
    audit = services["audit_service"]
    before = audit.count()
    seen: list[str] = []

    def _fail_commit() -> None:
        raise RuntimeError("disk full")

    monkeypatch.setattr(session, "commit", _fail_commit)
    domain_events.audit_appended.connect(seen.append)
    try:
        with pytest.raises(RuntimeError, match="disk full"):
            audit.append(admin, "Assigned member", "Nobody was added.")
    finally:
        domain_events.audit_appended.disconnect(seen.append)
    monkeypatch.undo()

    assert seen == []
    assert audit.count() == before
