"""Classification of engine differences against comparison settings."""

from __future__ import annotations

from typing import AbstractSet

from .models import Difference, DifferenceKind, Setting, Verdict


# Difference kinds that a setting can soften, and the setting that does it.
SOFTENABLE_KINDS = {
    DifferenceKind.ATTR_SEQUENCE: Setting.IGNORE_ATTRIBUTE_ORDER,
    DifferenceKind.NAMESPACE_PREFIX: Setting.TOLERATE_DIFFERENT_NAMESPACE_PREFIXES,
    DifferenceKind.COMMENT_VALUE: Setting.IGNORE_COMMENTS,
}


def classify(kind: DifferenceKind, settings: AbstractSet[Setting]) -> Verdict:
    """
    Decide how a difference of the given kind should be treated.

    Args:
        kind: The kind of difference reported by the engine
        settings: The active comparison settings

    Returns:
        EQUIVALENT when the matching setting is enabled, SIMILAR_ONLY when it
        is disabled, REJECT for every kind no setting can soften
    """
    setting = SOFTENABLE_KINDS.get(kind)
    if setting is None:
        return Verdict.REJECT
    if setting in settings:
        return Verdict.EQUIVALENT
    return Verdict.SIMILAR_ONLY


class ConfigurableDifferenceListener:
    """Difference listener that reflects a fixed set of settings."""

    def __init__(self, settings: AbstractSet[Setting]):
        self.settings = frozenset(settings)

    def difference_found(self, difference: Difference) -> Verdict:
        return classify(difference.kind, self.settings)

    def __repr__(self) -> str:
        names = sorted(s.name for s in self.settings)
        return f"ConfigurableDifferenceListener({names})"
