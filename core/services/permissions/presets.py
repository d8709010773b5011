from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from core.domain.enums import Capability, GlobalRole
from core.domain.project import PermissionMap
from core.exceptions import IncompletePresetError, NotFoundError
from core.services.permissions.catalog import capability_keys, implied_closure, parse_capability


@dataclass(frozen=True)
class Preset:
    key: str
    name: str
    grants: Mapping[Capability, bool]

    def as_map(self) -> PermissionMap:
        return dict(self.grants)


class PresetRegistry:
    """Named, complete capability bundles used as assignment templates.

    Callers always receive copies; a preset is never referenced live by a project.
    """

    def __init__(self, presets: Iterable[tuple[str, str, Mapping[Capability | str, bool]]] = ()):
        self._presets: dict[str, Preset] = {}
        for key, name, grants in presets:
            self.register(key, name, grants)

    def register(self, key: str, name: str, grants: Mapping[Capability | str, bool]) -> Preset:
        normalized_key = (key or "").strip().lower()
        if not normalized_key:
            raise IncompletePresetError("Preset key is required.", code="PRESET_KEY_REQUIRED")
        parsed = {parse_capability(k): bool(v) for k, v in grants.items()}
        missing = [c for c in capability_keys() if c not in parsed]
        if missing:
            names = ", ".join(c.value for c in missing)
            raise IncompletePresetError(
                f"Preset '{normalized_key}' is missing capabilities: {names}.",
                code="INCOMPLETE_PRESET",
            )
        for capability, granted in parsed.items():
            if not granted:
                continue
            unmet = [c for c in implied_closure(capability) if not parsed[c]]
            if unmet:
                names = ", ".join(sorted(c.value for c in unmet))
                raise IncompletePresetError(
                    f"Preset '{normalized_key}' grants '{capability.value}' without: {names}.",
                    code="PRESET_NOT_CLOSED",
                )
        ordered = {c: parsed[c] for c in capability_keys()}
        preset = Preset(key=normalized_key, name=name, grants=MappingProxyType(ordered))
        self._presets[normalized_key] = preset
        return preset

    def get(self, key: str) -> Preset:
        preset = self._presets.get((key or "").strip().lower())
        if preset is None:
            raise NotFoundError(f"Preset '{key}' not found.", code="PRESET_NOT_FOUND")
        return preset

    def get_preset(self, key: str) -> PermissionMap:
        return self.get(key).as_map()

    def list_presets(self) -> dict[str, Preset]:
        return dict(self._presets)

    def match_preset(self, override: Mapping[Capability, bool] | None) -> str | None:
        """Key of the preset equal to ``override`` key for key, or None for a custom set."""
        if not override:
            return None
        for key, preset in self._presets.items():
            if dict(override) == dict(preset.grants):
                return key
        return None

    def role_default_preset(self, role: GlobalRole) -> Preset:
        return self.get(ROLE_DEFAULT_PRESETS[role])


def _bundle(*granted: Capability) -> dict[Capability, bool]:
    return {c: c in granted for c in Capability}


MANAGER_PRESET = "manager"
SENIOR_QA_PRESET = "senior_qa"
TESTER_PRESET = "tester"
VIEWER_PRESET = "viewer"

BUILTIN_PRESETS: tuple[tuple[str, str, dict[Capability, bool]], ...] = (
    (
        MANAGER_PRESET,
        "Manager",
        _bundle(*(c for c in Capability if c is not Capability.ADMIN_OVERRIDE)),
    ),
    (
        SENIOR_QA_PRESET,
        "Senior QA",
        _bundle(
            Capability.VIEW_ASSIGNED_PROJECTS,
            Capability.AUTOMATE_TEST_CASES,
            Capability.CREATE_SRC_STRUCTURE,
            Capability.RUN_PIPELINES,
            Capability.COMMIT_AND_PUBLISH,
        ),
    ),
    (
        TESTER_PRESET,
        "Tester",
        _bundle(
            Capability.VIEW_ASSIGNED_PROJECTS,
            Capability.AUTOMATE_TEST_CASES,
            Capability.RUN_PIPELINES,
            Capability.COMMIT_AND_PUBLISH,
        ),
    ),
    (VIEWER_PRESET, "Viewer", _bundle(Capability.VIEW_ASSIGNED_PROJECTS)),
)

ROLE_DEFAULT_PRESETS: dict[GlobalRole, str] = {
    GlobalRole.MANAGER: MANAGER_PRESET,
    GlobalRole.EMPLOYEE: TESTER_PRESET,
}

DEFAULT_REGISTRY = PresetRegistry(BUILTIN_PRESETS)


def get_preset(key: str) -> PermissionMap:
    return DEFAULT_REGISTRY.get_preset(key)


def list_presets() -> dict[str, Preset]:
    return DEFAULT_REGISTRY.list_presets()


__all__ = [
    "Preset",
    "PresetRegistry",
    "BUILTIN_PRESETS",
    "ROLE_DEFAULT_PRESETS",
    "DEFAULT_REGISTRY",
    "MANAGER_PRESET",
    "SENIOR_QA_PRESET",
    "TESTER_PRESET",
    "VIEWER_PRESET",
    "get_preset",
    "list_presets",
]
