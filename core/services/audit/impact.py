from __future__ import annotations

from core.domain.enums import AuditAction, Impact

# Ordered; the first matching rule wins.
_IMPACT_RULES: tuple[tuple[tuple[str, ...], Impact], ...] = (
    (("Created project",), Impact.HIGH),
    (("Updated permissions", "Approved", "Denied"), Impact.MEDIUM),
)


def classify_impact(action_label: str) -> Impact:
    label = action_label or ""
    for needles, impact in _IMPACT_RULES:
        if any(needle in label for needle in needles):
            return impact
    return Impact.LOW


def derive_action_type(action_label: str) -> str:
    """Free-text labels are grouped by the text before ' for' and any quoted name."""
    label = (action_label or "").strip()
    return label.split(" for")[0].split(' "')[0].strip()


def impact_for(action_label: str, kind: AuditAction | None = None) -> Impact:
    if kind is not None:
        return kind.impact
    return classify_impact(action_label)


__all__ = ["classify_impact", "derive_action_type", "impact_for"]
