"""Tests for difference classification."""

import pytest
from xmatch import (
    ConfigurableDifferenceListener,
    DEFAULT_SETTINGS,
    Difference,
    DifferenceKind,
    NodeDetail,
    Setting,
    Verdict,
    classify,
)
from xmatch.classifier import SOFTENABLE_KINDS


ALL_SETTINGS = frozenset(Setting)
HARD_KINDS = [kind for kind in DifferenceKind if kind not in SOFTENABLE_KINDS]


class TestClassify:
    """Test the kind/settings to verdict mapping."""

    @pytest.mark.parametrize("kind,setting", [
        (DifferenceKind.ATTR_SEQUENCE, Setting.IGNORE_ATTRIBUTE_ORDER),
        (DifferenceKind.NAMESPACE_PREFIX, Setting.TOLERATE_DIFFERENT_NAMESPACE_PREFIXES),
        (DifferenceKind.COMMENT_VALUE, Setting.IGNORE_COMMENTS),
    ])
    def test_softenable_kinds(self, kind, setting):
        """Test enabled toggle gives EQUIVALENT, disabled gives SIMILAR_ONLY."""
        assert classify(kind, {setting}) is Verdict.EQUIVALENT
        assert classify(kind, set()) is Verdict.SIMILAR_ONLY
        assert classify(kind, ALL_SETTINGS - {setting}) is Verdict.SIMILAR_ONLY

    @pytest.mark.parametrize("kind", HARD_KINDS)
    @pytest.mark.parametrize("settings", [frozenset(), DEFAULT_SETTINGS, ALL_SETTINGS])
    def test_other_kinds_always_rejected(self, kind, settings):
        """Test every other kind is rejected whatever the settings."""
        assert classify(kind, settings) is Verdict.REJECT

    def test_only_three_softenable_kinds(self):
        """Test the softenable kinds are exactly attribute order, prefix and comment."""
        assert set(SOFTENABLE_KINDS) == {
            DifferenceKind.ATTR_SEQUENCE,
            DifferenceKind.NAMESPACE_PREFIX,
            DifferenceKind.COMMENT_VALUE,
        }


class TestConfigurableDifferenceListener:
    """Test the listener adapter."""

    def _difference(self, kind):
        return Difference(kind, NodeDetail("a"), NodeDetail("b"))

    def test_uses_its_settings(self):
        """Test verdicts follow the settings given at construction."""
        listener = ConfigurableDifferenceListener({Setting.IGNORE_COMMENTS})

        assert listener.difference_found(
            self._difference(DifferenceKind.COMMENT_VALUE)) is Verdict.EQUIVALENT
        assert listener.difference_found(
            self._difference(DifferenceKind.ATTR_SEQUENCE)) is Verdict.SIMILAR_ONLY
        assert listener.difference_found(
            self._difference(DifferenceKind.TEXT_VALUE)) is Verdict.REJECT

    def test_settings_are_copied(self):
        """Test later changes to the caller's set do not leak in."""
        settings = {Setting.IGNORE_COMMENTS}
        listener = ConfigurableDifferenceListener(settings)
        settings.clear()

        assert listener.settings == frozenset({Setting.IGNORE_COMMENTS})
