from __future__ import annotations

import random

import pytest

from core.domain import Capability, GlobalRole, Impact
from core.exceptions import (
    BusinessRuleError,
    DomainError,
    NotFoundError,
    OwnerContinuityViolation,
    UnknownCapabilityError,
    ValidationError,
)
from core.services.audit import AuditFilter
from core.services.permissions.presets import get_preset


def _project_entries(services, project_id):
    return services["audit_service"].query(AuditFilter(project_ids=[project_id]))


def _assert_membership_consistent(project):
    assert set(project.permissions) == set(project.member_ids)
    assert len(project.member_ids) == len(set(project.member_ids))


def test_create_project_logs_one_high_impact_entry(services, admin, make_user):
    ps = services["project_service"]
    alice = make_user("Alice Tester")

    project = ps.create_project("Checkout", "E2E suite", [alice.id], owner_id=admin.id)

    entries = _project_entries(services, project.id)
    assert len(entries) == 1
    assert entries[0].impact == Impact.HIGH
    assert 'Created project "Checkout"' in entries[0].action
    assert entries[0].details == "Assigned to 2 member(s)."
    assert project.member_ids == [admin.id, alice.id]
    assert project.permissions[admin.id] == get_preset("manager")
    assert project.permissions[alice.id] == {}
    _assert_membership_consistent(ps.get_project(project.id))


def test_create_project_validates_name_and_owner(services, admin):
    ps = services["project_service"]
    ps.create_project("Checkout", owner_id=admin.id)

    with pytest.raises(ValidationError) as dup:
        ps.create_project("  checkout ", owner_id=admin.id)
    assert dup.value.code == "PROJECT_NAME_DUPLICATE"

    with pytest.raises(ValidationError) as empty:
        ps.create_project("   ", owner_id=admin.id)
    assert empty.value.code == "PROJECT_NAME_EMPTY"

    with pytest.raises(ValidationError) as owner:
        ps.create_project("Orphan")
    assert owner.value.code == "PROJECT_OWNER_REQUIRED"


def test_owner_cannot_lose_merge_rights_while_no_one_else_has_them(services, admin, make_user):
    ps = services["project_service"]
    audit = services["audit_service"]
    member = make_user("Mo Member")
    project = ps.create_project("Payments", member_ids=[member.id], owner_id=admin.id)
    before_count = audit.count()

    with pytest.raises(OwnerContinuityViolation) as exc:
        ps.set_capability(project.id, admin.id, Capability.APPROVE_MERGE_PRS, False)

    assert exc.value.code == "OWNER_CONTINUITY"
    assert audit.count() == before_count
    reloaded = ps.get_project(project.id)
    assert reloaded.permissions == project.permissions
    assert ps.effective_permissions(admin.id, project.id)[Capability.APPROVE_MERGE_PRS] is True


def test_merge_rights_can_move_once_someone_else_holds_them(services, admin, make_user):
    ps = services["project_service"]
    member = make_user("Mo Member")
    project = ps.create_project("Payments", member_ids=[member.id], owner_id=admin.id)

    ps.set_capability(project.id, member.id, Capability.APPROVE_MERGE_PRS, True)
    ps.set_capability(project.id, admin.id, Capability.APPROVE_MERGE_PRS, False)

    assert ps.owner_equivalents(project.id) == [member.id]
    entries = _project_entries(services, project.id)
    assert [e.impact for e in entries[:2]] == [Impact.MEDIUM, Impact.MEDIUM]
    assert entries[0].action == 'Updated permissions for "Payments"'
    assert entries[0].details.endswith("Approve/Merge PRs revoked.")


def test_granting_automation_turns_on_view(services, admin, make_user):
    ps = services["project_service"]
    member = make_user("Mo Member")
    project = ps.create_project("Search", member_ids=[member.id], owner_id=admin.id)
    ps.set_capability(project.id, member.id, Capability.VIEW_ASSIGNED_PROJECTS, False)
    assert not any(ps.effective_permissions(member.id, project.id).values())

    ps.set_capability(project.id, member.id, "automateTestCases", True)

    effective = ps.effective_permissions(member.id, project.id)
    assert effective[Capability.AUTOMATE_TEST_CASES] is True
    assert effective[Capability.VIEW_ASSIGNED_PROJECTS] is True


def test_viewer_preset_resolves_to_view_only(services, admin, make_user):
    ps = services["project_service"]
    member = make_user("Val Viewer")
    project = ps.create_project("Search", member_ids=[member.id], owner_id=admin.id)

    ps.apply_preset(project.id, member.id, "viewer")

    effective = ps.effective_permissions(member.id, project.id)
    assert [k for k, v in effective.items() if v] == [Capability.VIEW_ASSIGNED_PROJECTS]
    assert ps.member_preset(project.id, member.id) == "viewer"
    assert _project_entries(services, project.id)[0].details == "Applied preset 'Viewer' to Val Viewer."


def test_add_members_logs_one_entry_per_member_plus_summary(services, admin, make_user):
    ps = services["project_service"]
    project = ps.create_project("Mobile", owner_id=admin.id)
    a = make_user("Ann Added")
    b = make_user("Ben Added")

    updated = ps.add_members(project.id, [a.id, b.id, a.id], preset="senior_qa")

    assert updated.member_ids == [admin.id, a.id, b.id]
    _assert_membership_consistent(ps.get_project(project.id))
    entries = _project_entries(services, project.id)
    assert len(entries) == 4
    actions = [e.action for e in entries[:3]]
    assert actions.count("Assigned member") == 2
    assert 'Updated permissions for "Mobile"' in actions
    assert ps.member_preset(project.id, a.id) == "senior_qa"

    with pytest.raises(ValidationError) as exc:
        ps.add_member(project.id, b.id)
    assert exc.value.code == "NO_NEW_MEMBERS"


def test_inactive_users_cannot_be_added(services, admin, make_user):
    ps = services["project_service"]
    us = services["user_service"]
    project = ps.create_project("Mobile", owner_id=admin.id)
    gone = make_user("Gone User")
    us.set_user_active(gone.id, False)

    with pytest.raises(ValidationError) as exc:
        ps.add_member(project.id, gone.id)
    assert exc.value.code == "USER_INACTIVE"


def test_remove_member_rules(services, admin, make_user):
    ps = services["project_service"]
    keeper = make_user("Kim Keeper")
    leaver = make_user("Lee Leaver")
    project = ps.create_project("Billing", member_ids=[keeper.id, leaver.id], owner_id=admin.id)

    with pytest.raises(BusinessRuleError) as owner:
        ps.remove_member(project.id, admin.id)
    assert owner.value.code == "OWNER_REMOVAL_FORBIDDEN"

    updated = ps.remove_member(project.id, leaver.id)
    assert updated.member_ids == [admin.id, keeper.id]
    assert _project_entries(services, project.id)[0].action == "Removed member"
    assert ps.effective_permissions(leaver.id, project.id) == {c: False for c in Capability}

    with pytest.raises(NotFoundError):
        ps.remove_member(project.id, leaver.id)

    # The sole owner-equivalent cannot leave; merge rights must be reassigned first.
    ps.set_capability(project.id, keeper.id, Capability.APPROVE_MERGE_PRS, True)
    ps.set_capability(project.id, admin.id, Capability.APPROVE_MERGE_PRS, False)
    with pytest.raises(OwnerContinuityViolation):
        ps.remove_member(project.id, keeper.id)
    _assert_membership_consistent(ps.get_project(project.id))


def test_project_default_preset_applies_to_members_without_override(services, admin, make_user):
    ps = services["project_service"]
    member = make_user("Dee Default")

    project = ps.create_project("Docs", member_ids=[member.id], owner_id=admin.id, default_preset="Viewer")

    assert project.default_preset == "viewer"
    assert ps.effective_permissions(member.id, project.id) == get_preset("viewer")
    assert ps.effective_permissions(admin.id, project.id)[Capability.APPROVE_MERGE_PRS] is True


def test_member_presets_seed_initial_overrides(services, admin, make_user):
    ps = services["project_service"]
    lead = make_user("Lea Lead", GlobalRole.EMPLOYEE)

    project = ps.create_project(
        "Infra",
        member_ids=[lead.id],
        owner_id=admin.id,
        member_presets={lead.id: "senior_qa"},
    )

    assert project.permissions[lead.id] == get_preset("senior_qa")


def test_preview_does_not_touch_state(services, admin, make_user):
    ps = services["project_service"]
    audit = services["audit_service"]
    member = make_user("Pat Preview")
    project = ps.create_project("Preview", member_ids=[member.id], owner_id=admin.id)
    before = audit.count()

    preview = ps.preview_effective(project.id, member.id, {"approveMergePRs": True})

    assert preview[Capability.APPROVE_MERGE_PRS] is True
    assert ps.effective_permissions(member.id, project.id)[Capability.APPROVE_MERGE_PRS] is False
    assert audit.count() == before


def test_update_permissions_saves_closed_overrides(services, admin, make_user):
    ps = services["project_service"]
    member = make_user("Bo Bulk")
    project = ps.create_project("Bulk", member_ids=[member.id], owner_id=admin.id)

    ps.update_permissions(
        project.id,
        {member.id: {"commitAndPublish": True, "viewAssignedProjects": False, "runPipelines": False}},
    )

    effective = ps.effective_permissions(member.id, project.id)
    assert effective[Capability.VIEW_ASSIGNED_PROJECTS] is True
    assert effective[Capability.AUTOMATE_TEST_CASES] is True
    assert effective[Capability.RUN_PIPELINES] is False


def test_unknown_keys_and_presets_are_rejected(services, admin, make_user):
    ps = services["project_service"]
    member = make_user("Uma Unknown")
    project = ps.create_project("Keys", member_ids=[member.id], owner_id=admin.id)

    with pytest.raises(UnknownCapabilityError):
        ps.set_capability(project.id, member.id, "deployToProd", True)
    with pytest.raises(NotFoundError) as exc:
        ps.apply_preset(project.id, member.id, "chaos")
    assert exc.value.code == "PRESET_NOT_FOUND"


def test_session_capabilities_gate_mutations(services, admin, make_user, login):
    ps = services["project_service"]
    tester = make_user("Tess Tester")
    other = make_user("Otto Other")
    project = ps.create_project("Gated", member_ids=[tester.id], owner_id=admin.id)

    login(tester)
    with pytest.raises(BusinessRuleError, match="Permission denied") as add:
        ps.add_member(project.id, other.id)
    assert add.value.code == "PERMISSION_DENIED"
    with pytest.raises(BusinessRuleError, match="Permission denied"):
        ps.create_project("Not allowed")

    login(admin)
    created = ps.create_project("Owned by admin")
    assert created.owner_id == admin.id
    with pytest.raises(BusinessRuleError) as self_preset:
        ps.apply_preset(project.id, admin.id, "viewer")
    assert self_preset.value.code == "SELF_PRESET_FORBIDDEN"

    entries = _project_entries(services, created.id)
    assert entries[0].actor_user_id == admin.id
    assert entries[0].actor_email == admin.email


def test_admin_override_grants_management_to_an_employee(services, admin, make_user, login):
    ps = services["project_service"]
    boss = make_user("Bea Bypass")
    newcomer = make_user("Nick New")
    project = ps.create_project("Override", member_ids=[boss.id], owner_id=admin.id)
    ps.set_capability(project.id, boss.id, Capability.ADMIN_OVERRIDE, True)

    login(boss)
    ps.add_member(project.id, newcomer.id)

    assert newcomer.id in ps.get_project(project.id).member_ids
    assert all(ps.effective_permissions(boss.id, project.id).values())


def _assert_project_consistent(ps, project_id):
    project = ps.get_project(project_id)
    assert set(project.permissions) == set(project.member_ids)
    assert len(project.member_ids) == len(set(project.member_ids))
    assert project.owner_id in project.member_ids
    assert ps.owner_equivalents(project_id)
    return project


@pytest.mark.parametrize("seed", [3, 11, 42, 2026])
def test_mixed_mutation_sequences_keep_owner_continuity_and_key_consistency(
    services, admin, make_user, seed
):
    ps = services["project_service"]
    rng = random.Random(seed)
    pool = [make_user(f"Mix Employee {n}") for n in range(4)]
    pool.append(make_user("Mix Manager", GlobalRole.MANAGER))
    project = ps.create_project(f"Mixed {seed}", member_ids=[pool[0].id], owner_id=admin.id)
    capabilities = list(Capability)
    presets = ["manager", "senior_qa", "tester", "viewer"]
    rejected = 0

    for _ in range(40):
        before = _assert_project_consistent(ps, project.id)
        members = list(before.member_ids)
        outsiders = [u.id for u in pool if u.id not in members]
        op = rng.choice(["set", "set", "preset", "add", "remove"])
        try:
            if op == "set":
                ps.set_capability(project.id, rng.choice(members), rng.choice(capabilities), rng.random() < 0.5)
            elif op == "preset":
                ps.apply_preset(project.id, rng.choice(members), rng.choice(presets))
            elif op == "add" and outsiders:
                ps.add_member(project.id, rng.choice(outsiders), preset=rng.choice([None, *presets]))
            elif op == "remove":
                ps.remove_member(project.id, rng.choice(members))
        except DomainError:
            rejected += 1
            after = ps.get_project(project.id)
            assert after.version == before.version
            assert after.permissions == before.permissions
            assert after.member_ids == before.member_ids

    _assert_project_consistent(ps, project.id)
    assert rejected < 40
