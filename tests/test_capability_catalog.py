from __future__ import annotations

import pytest

from core.domain import Capability, CapabilityCategory
from core.exceptions import CapabilityCycleError, UnknownCapabilityError
from core.services.permissions.catalog import (
    CATALOG,
    CapabilityInfo,
    build_catalog,
    capabilities_by_category,
    dependents_closure,
    implied_closure,
    list_capabilities,
    parse_capability,
)


def test_catalog_lists_every_capability_in_declaration_order():
    keys = [info.key for info in list_capabilities()]

    assert keys == list(Capability)
    assert CATALOG[Capability.AUTOMATE_TEST_CASES].label == "Automate Tests"
    assert all(info.description for info in list_capabilities())


def test_automation_implies_view_and_reverse_edges_are_filled():
    automate = CATALOG[Capability.AUTOMATE_TEST_CASES]
    view = CATALOG[Capability.VIEW_ASSIGNED_PROJECTS]

    assert Capability.VIEW_ASSIGNED_PROJECTS in automate.implies
    assert Capability.AUTOMATE_TEST_CASES in view.implied_by
    for info in list_capabilities():
        for target in info.implies:
            assert info.key in CATALOG[target].implied_by


def test_closures_follow_implications_transitively():
    assert implied_closure(Capability.CREATE_SRC_STRUCTURE) == {
        Capability.AUTOMATE_TEST_CASES,
        Capability.VIEW_ASSIGNED_PROJECTS,
    }
    assert implied_closure(Capability.VIEW_ASSIGNED_PROJECTS) == frozenset()

    dependents = dependents_closure(Capability.AUTOMATE_TEST_CASES)
    assert dependents == {
        Capability.CREATE_SRC_STRUCTURE,
        Capability.COMMIT_AND_PUBLISH,
        Capability.ADMIN_OVERRIDE,
    }


def test_admin_override_implies_everything_else():
    others = {c for c in Capability if c is not Capability.ADMIN_OVERRIDE}
    assert implied_closure(Capability.ADMIN_OVERRIDE) == others


def test_parse_capability_rejects_unknown_keys():
    assert parse_capability(" syncTMT ") is Capability.SYNC_TMT

    with pytest.raises(UnknownCapabilityError) as exc:
        parse_capability("deleteEverything")
    assert exc.value.code == "UNKNOWN_CAPABILITY"


def test_capabilities_grouped_by_category():
    grouped = capabilities_by_category()

    assert grouped[CapabilityCategory.ADMIN] == [
        Capability.APPROVE_ACCESS_REQUESTS,
        Capability.ADMIN_OVERRIDE,
    ]
    assert Capability.CREATE_PROJECT in grouped[CapabilityCategory.MANAGEMENT]
    assert sum(len(v) for v in grouped.values()) == len(Capability)


def _info(key: Capability, *implies: Capability) -> CapabilityInfo:
    return CapabilityInfo(
        key=key,
        label=key.value,
        description="",
        category=CapabilityCategory.PROJECT,
        implies=frozenset(implies),
    )


def test_build_catalog_detects_cycles():
    with pytest.raises(CapabilityCycleError, match="cycle"):
        build_catalog(
            [
                _info(Capability.VIEW_ASSIGNED_PROJECTS, Capability.RUN_PIPELINES),
                _info(Capability.RUN_PIPELINES, Capability.AUTOMATE_TEST_CASES),
                _info(Capability.AUTOMATE_TEST_CASES, Capability.VIEW_ASSIGNED_PROJECTS),
            ]
        )


def test_build_catalog_rejects_undefined_targets():
    with pytest.raises(UnknownCapabilityError, match="undefined"):
        build_catalog([_info(Capability.AUTOMATE_TEST_CASES, Capability.VIEW_ASSIGNED_PROJECTS)])
