"""Effective-permission resolution and mutation validation.

Everything here is a pure transform over plain data: inputs are never
modified, so the same functions serve real mutations and read-only previews.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from core.domain.enums import Capability, GlobalRole
from core.domain.project import PermissionMap, Project
from core.exceptions import NotFoundError
from core.services.permissions.catalog import (
    CATALOG,
    capability_keys,
    dependents_closure,
    implied_closure,
    parse_capability,
)
from core.services.permissions.presets import DEFAULT_REGISTRY, PresetRegistry

OWNER_CAPABILITY = Capability.APPROVE_MERGE_PRS

Roles = Mapping[str, GlobalRole]
MemberOverrides = Dict[str, PermissionMap]


@dataclass(frozen=True)
class Violation:
    code: str
    message: str


@dataclass(frozen=True)
class ResolveOutcome:
    permissions: MemberOverrides = field(default_factory=dict)
    violation: Violation | None = None

    @property
    def ok(self) -> bool:
        return self.violation is None


def copy_overrides(permissions: Mapping[str, Mapping[Capability, bool]]) -> MemberOverrides:
    return {user_id: dict(override or {}) for user_id, override in permissions.items()}


def close_dependencies(permissions: Mapping[Capability, bool]) -> PermissionMap:
    """Force every capability implied by a granted one to true, until nothing changes."""
    result = dict(permissions)
    changed = True
    while changed:
        changed = False
        for key, granted in list(result.items()):
            if not granted:
                continue
            for target in CATALOG[key].implies:
                if not result.get(target):
                    result[target] = True
                    changed = True
    return result


def resolve_effective(
    baseline: Mapping[Capability, bool],
    override: Mapping[Capability, bool] | None = None,
) -> PermissionMap:
    override = override or {}
    merged: PermissionMap = {}
    for key in capability_keys():
        if key in override:
            merged[key] = bool(override[key])
        else:
            merged[key] = bool(baseline.get(key, False))
    return close_dependencies(merged)


def no_permissions() -> PermissionMap:
    return {key: False for key in capability_keys()}


def baseline_for(
    project: Project,
    role: GlobalRole,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> PermissionMap:
    if project.default_preset:
        return registry.get_preset(project.default_preset)
    return registry.role_default_preset(role).as_map()


def _role_of(roles: Roles, user_id: str) -> GlobalRole:
    role = roles.get(user_id)
    if role is None:
        raise NotFoundError(f"No global role known for user '{user_id}'.", code="USER_NOT_FOUND")
    return role


def effective_for_member(
    project: Project,
    user_id: str,
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
    *,
    permissions: Mapping[str, Mapping[Capability, bool]] | None = None,
) -> PermissionMap:
    current = project.permissions if permissions is None else permissions
    if user_id not in current:
        return no_permissions()
    baseline = baseline_for(project, _role_of(roles, user_id), registry)
    return resolve_effective(baseline, current.get(user_id))


def count_owner_equivalents(
    project: Project,
    permissions: Mapping[str, Mapping[Capability, bool]],
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> int:
    return sum(
        1
        for user_id in permissions
        if effective_for_member(project, user_id, roles, registry, permissions=permissions)[OWNER_CAPABILITY]
    )


def validate_mutation(
    project: Project,
    proposed: Mapping[str, Mapping[Capability, bool]],
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> Violation | None:
    """Check a proposed member -> override map against owner continuity.

    The keys of ``proposed`` are the proposed member set.
    """
    if count_owner_equivalents(project, proposed, roles, registry) == 0:
        label = CATALOG[OWNER_CAPABILITY].label
        return Violation(
            code="OWNER_CONTINUITY",
            message=(
                f"At least one member of '{project.name}' must keep the "
                f"'{label}' permission."
            ),
        )
    return None


def _require_member(project: Project, permissions: Mapping[str, object], user_id: str) -> None:
    if user_id not in permissions:
        raise NotFoundError(
            f"User '{user_id}' is not a member of '{project.name}'.",
            code="MEMBER_NOT_FOUND",
        )


def _outcome(
    project: Project,
    proposed: MemberOverrides,
    roles: Roles,
    registry: PresetRegistry,
) -> ResolveOutcome:
    violation = validate_mutation(project, proposed, roles, registry)
    if violation is not None:
        return ResolveOutcome(permissions=copy_overrides(project.permissions), violation=violation)
    return ResolveOutcome(permissions=proposed)


def with_capability(
    override: Mapping[Capability, bool],
    key: Capability,
    value: bool,
) -> PermissionMap:
    """Set one key on an override, carrying implied grants and dependent revocations along."""
    updated = dict(override)
    updated[key] = bool(value)
    if value:
        for target in implied_closure(key):
            updated[target] = True
    else:
        for dependent in dependents_closure(key):
            updated[dependent] = False
    return updated


def apply_preset(
    project: Project,
    user_id: str,
    preset_key: str,
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> ResolveOutcome:
    grants = registry.get_preset(preset_key)
    _require_member(project, project.permissions, user_id)
    proposed = copy_overrides(project.permissions)
    proposed[user_id] = grants
    return _outcome(project, proposed, roles, registry)


def set_capability(
    project: Project,
    user_id: str,
    capability: Capability | str,
    value: bool,
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> ResolveOutcome:
    return set_capabilities(project, user_id, {capability: value}, roles, registry)


def set_capabilities(
    project: Project,
    user_id: str,
    changes: Mapping[Capability | str, bool],
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> ResolveOutcome:
    parsed = [(parse_capability(key), bool(value)) for key, value in changes.items()]
    _require_member(project, project.permissions, user_id)
    proposed = copy_overrides(project.permissions)
    override = proposed.get(user_id, {})
    for key, value in parsed:
        override = with_capability(override, key, value)
    proposed[user_id] = override
    return _outcome(project, proposed, roles, registry)


def replace_overrides(
    project: Project,
    overrides: Mapping[str, Mapping[Capability | str, bool]],
    roles: Roles,
    registry: PresetRegistry = DEFAULT_REGISTRY,
) -> ResolveOutcome:
    """Bulk save: every current member gets the given override (missing members keep theirs)."""
    proposed = copy_overrides(project.permissions)
    for user_id, override in overrides.items():
        _require_member(project, proposed, user_id)
        parsed = {parse_capability(k): bool(v) for k, v in (override or {}).items()}
        proposed[user_id] = close_dependencies(parsed)
    return _outcome(project, proposed, roles, registry)


__all__ = [
    "OWNER_CAPABILITY",
    "Violation",
    "ResolveOutcome",
    "copy_overrides",
    "close_dependencies",
    "resolve_effective",
    "no_permissions",
    "baseline_for",
    "effective_for_member",
    "count_owner_equivalents",
    "validate_mutation",
    "with_capability",
    "apply_preset",
    "set_capability",
    "set_capabilities",
    "replace_overrides",
]
