"""Capability catalog.

The fixed, ordered set of project capabilities with their labels and the
implication graph between them. The graph is validated when the module is
imported, so a cyclic configuration fails loudly before anything resolves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from core.domain.enums import Capability, CapabilityCategory
from core.exceptions import CapabilityCycleError, UnknownCapabilityError


@dataclass(frozen=True)
class CapabilityInfo:
    key: Capability
    label: str
    description: str
    category: CapabilityCategory
    implies: frozenset[Capability] = frozenset()
    implied_by: frozenset[Capability] = frozenset()


def _capability(
    key: Capability,
    *,
    label: str,
    description: str,
    category: CapabilityCategory,
    implies: Iterable[Capability] = (),
) -> CapabilityInfo:
    return CapabilityInfo(
        key=key,
        label=label,
        description=description,
        category=category,
        implies=frozenset(implies),
    )


_VIEW = Capability.VIEW_ASSIGNED_PROJECTS
_AUTOMATE = Capability.AUTOMATE_TEST_CASES

CAPABILITY_DEFINITIONS: tuple[CapabilityInfo, ...] = (
    # Project -----------------------------------------------------------
    _capability(
        _VIEW,
        label="View Projects",
        description="Can see projects they are assigned to in their dashboard.",
        category=CapabilityCategory.PROJECT,
    ),
    _capability(
        _AUTOMATE,
        label="Automate Tests",
        description="Allows user to write and commit new test automation scripts.",
        category=CapabilityCategory.PROJECT,
        implies=(_VIEW,),
    ),
    _capability(
        Capability.CREATE_SRC_STRUCTURE,
        label="Create Folders",
        description="Allows user to create new folders under the framework when automating tests.",
        category=CapabilityCategory.PROJECT,
        implies=(_AUTOMATE,),
    ),
    _capability(
        Capability.RUN_PIPELINES,
        label="Run Pipelines",
        description="Enables user to trigger CI/CD test execution pipelines.",
        category=CapabilityCategory.PROJECT,
        implies=(_VIEW,),
    ),
    _capability(
        Capability.APPROVE_MERGE_PRS,
        label="Approve/Merge PRs",
        description="Grants permissions to approve and merge pull requests to the main branch.",
        category=CapabilityCategory.PROJECT,
        implies=(_VIEW,),
    ),
    _capability(
        Capability.COMMIT_AND_PUBLISH,
        label="Commit & Publish",
        description="Allows user to commit code and publish artifacts.",
        category=CapabilityCategory.PROJECT,
        implies=(_AUTOMATE,),
    ),
    # Management --------------------------------------------------------
    _capability(
        Capability.CREATE_PROJECT,
        label="Create Project",
        description="Allows user to create new testing projects.",
        category=CapabilityCategory.MANAGEMENT,
    ),
    _capability(
        Capability.EDIT_PROJECT_SETTINGS,
        label="Edit Settings",
        description="Can modify project settings, including framework and integrations.",
        category=CapabilityCategory.MANAGEMENT,
        implies=(_VIEW,),
    ),
    _capability(
        Capability.ASSIGN_USERS,
        label="Assign Users",
        description="Can add or remove users from a project and define their roles.",
        category=CapabilityCategory.MANAGEMENT,
        implies=(_VIEW,),
    ),
    _capability(
        Capability.SYNC_TMT,
        label="Sync TMT",
        description="Can sync test cases with an integrated Test Management Tool.",
        category=CapabilityCategory.MANAGEMENT,
        implies=(_VIEW,),
    ),
    # Admin -------------------------------------------------------------
    _capability(
        Capability.APPROVE_ACCESS_REQUESTS,
        label="Approve Requests",
        description="Can approve or deny requests for higher permissions.",
        category=CapabilityCategory.ADMIN,
        implies=(Capability.ASSIGN_USERS,),
    ),
    _capability(
        Capability.ADMIN_OVERRIDE,
        label="Admin Override",
        description="Provides unrestricted access to all projects and settings, bypassing standard permissions.",
        category=CapabilityCategory.ADMIN,
        implies=tuple(c for c in Capability if c is not Capability.ADMIN_OVERRIDE),
    ),
)


def _check_acyclic(implies: Mapping[Capability, frozenset[Capability]]) -> None:
    visiting: set[Capability] = set()
    done: set[Capability] = set()

    def visit(node: Capability, path: list[Capability]) -> None:
        if node in done:
            return
        if node in visiting:
            cycle = " -> ".join(c.value for c in [*path, node])
            raise CapabilityCycleError(
                f"Capability implications contain a cycle: {cycle}.",
                code="CAPABILITY_CYCLE",
            )
        visiting.add(node)
        for target in sorted(implies.get(node, ()), key=lambda c: c.value):
            visit(target, [*path, node])
        visiting.discard(node)
        done.add(node)

    for key in implies:
        visit(key, [])


def build_catalog(definitions: Iterable[CapabilityInfo]) -> dict[Capability, CapabilityInfo]:
    """Validate definitions and fill in the reverse ``implied_by`` edges.

    Raises ``CapabilityCycleError`` for cyclic graphs and ``UnknownCapabilityError``
    when an implication targets a key without a definition.
    """
    defs = list(definitions)
    keys = {d.key for d in defs}
    implies = {d.key: d.implies for d in defs}
    for d in defs:
        missing = d.implies - keys
        if missing:
            names = ", ".join(sorted(m.value for m in missing))
            raise UnknownCapabilityError(f"'{d.key.value}' implies undefined capabilities: {names}.")
    _check_acyclic(implies)

    implied_by: dict[Capability, set[Capability]] = {d.key: set() for d in defs}
    for d in defs:
        for target in d.implies:
            implied_by[target].add(d.key)

    return {
        d.key: CapabilityInfo(
            key=d.key,
            label=d.label,
            description=d.description,
            category=d.category,
            implies=d.implies,
            implied_by=frozenset(implied_by[d.key]),
        )
        for d in defs
    }


CATALOG: dict[Capability, CapabilityInfo] = build_catalog(CAPABILITY_DEFINITIONS)


def list_capabilities() -> tuple[CapabilityInfo, ...]:
    return tuple(CATALOG.values())


def capability_keys() -> tuple[Capability, ...]:
    return tuple(CATALOG.keys())


def parse_capability(raw: Capability | str) -> Capability:
    if isinstance(raw, Capability):
        return raw
    try:
        return Capability(str(raw).strip())
    except ValueError as exc:
        raise UnknownCapabilityError(f"Unknown capability '{raw}'.") from exc


def get_capability_info(key: Capability | str) -> CapabilityInfo:
    return CATALOG[parse_capability(key)]


def implied_closure(key: Capability) -> frozenset[Capability]:
    """Everything ``key`` grants transitively, excluding ``key`` itself."""
    seen: set[Capability] = set()
    stack = list(CATALOG[key].implies)
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        stack.extend(CATALOG[current].implies)
    return frozenset(seen)


def dependents_closure(key: Capability) -> frozenset[Capability]:
    """Every capability that transitively implies ``key``."""
    seen: set[Capability] = set()
    stack = list(CATALOG[key].implied_by)
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        stack.extend(CATALOG[current].implied_by)
    return frozenset(seen)


def capabilities_by_category() -> dict[CapabilityCategory, list[Capability]]:
    grouped: dict[CapabilityCategory, list[Capability]] = {c: [] for c in CapabilityCategory}
    for info in CATALOG.values():
        grouped[info.category].append(info.key)
    return grouped


__all__ = [
    "CapabilityInfo",
    "CAPABILITY_DEFINITIONS",
    "CATALOG",
    "build_catalog",
    "list_capabilities",
    "capability_keys",
    "parse_capability",
    "get_capability_info",
    "implied_closure",
    "dependents_closure",
    "capabilities_by_category",
]
