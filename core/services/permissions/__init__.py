from core.services.permissions.catalog import (
    CATALOG,
    CapabilityInfo,
    get_capability_info,
    list_capabilities,
    parse_capability,
)
from core.services.permissions.presets import (
    DEFAULT_REGISTRY,
    Preset,
    PresetRegistry,
    get_preset,
    list_presets,
)
from core.services.permissions.resolver import (
    ResolveOutcome,
    Violation,
    apply_preset,
    effective_for_member,
    resolve_effective,
    set_capability,
    validate_mutation,
)

__all__ = [
    "CATALOG",
    "CapabilityInfo",
    "get_capability_info",
    "list_capabilities",
    "parse_capability",
    "DEFAULT_REGISTRY",
    "Preset",
    "PresetRegistry",
    "get_preset",
    "list_presets",
    "ResolveOutcome",
    "Violation",
    "apply_preset",
    "effective_for_member",
    "resolve_effective",
    "set_capability",
    "validate_mutation",
]
