from __future__ import annotations

import pytest

from core.domain import AccessRequestStatus, Capability, Impact
from core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from core.services.audit import AuditFilter


@pytest.fixture
def setup(services, admin, make_user):
    ps = services["project_service"]
    requester = make_user("Rae Requester")
    peer = make_user("Pete Peer")
    project = ps.create_project("Portal", member_ids=[requester.id, peer.id], owner_id=admin.id)
    return project, requester, peer


def _entries(services, project_id):
    return services["audit_service"].query(AuditFilter(project_ids=[project_id]))


def test_member_submits_request_for_missing_capabilities(services, setup):
    project, requester, _ = setup
    ars = services["access_request_service"]

    request = ars.submit(
        project.id,
        ["approveMergePRs", Capability.VIEW_ASSIGNED_PROJECTS],
        " Release duty ",
        requested_by=requester.id,
    )

    assert request.id.startswith("req_")
    assert request.status == AccessRequestStatus.PENDING
    assert request.capabilities == [Capability.APPROVE_MERGE_PRS]
    assert request.justification == "Release duty"
    assert [r.id for r in ars.list_pending(project_id=project.id)] == [request.id]
    entry = _entries(services, project.id)[0]
    assert entry.action == "Requested access"
    assert entry.impact == Impact.LOW


def test_submit_rejects_non_members_and_redundant_requests(services, setup, make_user):
    project, requester, _ = setup
    ars = services["access_request_service"]
    outsider = make_user("Ola Outsider")

    with pytest.raises(BusinessRuleError) as outside:
        ars.submit(project.id, ["syncTMT"], requested_by=outsider.id)
    assert outside.value.code == "REQUESTER_NOT_MEMBER"

    with pytest.raises(ValidationError) as redundant:
        ars.submit(project.id, ["runPipelines"], requested_by=requester.id)
    assert redundant.value.code == "NOTHING_TO_REQUEST"

    with pytest.raises(ValidationError) as anonymous:
        ars.submit(project.id, ["syncTMT"])
    assert anonymous.value.code == "REQUESTER_REQUIRED"


def test_approval_grants_capabilities_through_the_resolver(services, admin, setup, login):
    project, requester, _ = setup
    ars = services["access_request_service"]
    ps = services["project_service"]
    request = ars.submit(project.id, ["createSrcStructure"], requested_by=requester.id)

    login(admin)
    decided = ars.approve(request.id, "ok")

    assert decided.status == AccessRequestStatus.APPROVED
    assert decided.decided_by_user_id == admin.id
    assert decided.decision_note == "ok"
    effective = ps.effective_permissions(requester.id, project.id)
    assert effective[Capability.CREATE_SRC_STRUCTURE] is True
    assert effective[Capability.AUTOMATE_TEST_CASES] is True
    entry = _entries(services, project.id)[0]
    assert entry.action == 'Approved access request for "Portal"'
    assert entry.impact == Impact.MEDIUM
    assert ars.list_pending() == []

    with pytest.raises(BusinessRuleError) as again:
        ars.deny(request.id)
    assert again.value.code == "ACCESS_REQUEST_ALREADY_DECIDED"


def test_deny_leaves_permissions_untouched(services, admin, setup, login):
    project, requester, _ = setup
    ars = services["access_request_service"]
    ps = services["project_service"]
    request = ars.submit(project.id, ["syncTMT"], requested_by=requester.id)

    login(admin)
    decided = ars.deny(request.id, "not now")

    assert decided.status == AccessRequestStatus.DENIED
    assert ps.effective_permissions(requester.id, project.id)[Capability.SYNC_TMT] is False
    entry = _entries(services, project.id)[0]
    assert entry.action == 'Denied access request for "Portal"'
    assert entry.impact == Impact.MEDIUM
    assert [r.id for r in ars.list_requests(status="denied")] == [request.id]


def test_deciders_need_approve_requests_and_cannot_decide_their_own(services, setup, login):
    project, requester, peer = setup
    ars = services["access_request_service"]
    request = ars.submit(project.id, ["syncTMT"], requested_by=requester.id)

    login(peer)
    with pytest.raises(BusinessRuleError) as denied:
        ars.approve(request.id)
    assert denied.value.code == "PERMISSION_DENIED"

    login(requester)
    with pytest.raises(BusinessRuleError) as own:
        ars.deny(request.id)
    assert own.value.code == "ACCESS_REQUEST_SELF_DECISION_FORBIDDEN"

    assert ars.list_pending(project_id=project.id)[0].status == AccessRequestStatus.PENDING


def test_unknown_request_and_status(services):
    ars = services["access_request_service"]

    with pytest.raises(NotFoundError):
        ars.approve("missing")
    with pytest.raises(ValidationError) as status:
        ars.list_requests(status="maybe")
    assert status.value.code == "INVALID_STATUS"
