"""Matcher for semantic equivalence of XML documents."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from .classifier import ConfigurableDifferenceListener
from .context import EngineContext
from .description import Description
from .differ import DetailedDiff, Diff
from .models import DEFAULT_SETTINGS, Setting
from .values import XmlValue

logger = logging.getLogger(__name__)


InitializeDiff = Callable[[XmlValue, XmlValue], Diff]
ConfigureDiff = Callable[[Diff, frozenset], Diff]


def default_initialize_diff(expected: XmlValue, actual: XmlValue) -> Diff:
    """Build a diff by parsing fresh input from both values."""
    return Diff(expected.get(), actual.get())


def classifying_diff(base_diff: Diff, settings: frozenset) -> Diff:
    """
    Route every difference of ``base_diff`` through the settings classifier.

    Returns a DetailedDiff wrapping the base diff, so all differences are
    reported instead of only the first one.
    """
    listener = ConfigurableDifferenceListener(settings)
    base_diff.override_difference_listener(listener)
    detailed = DetailedDiff(base_diff)
    detailed.override_difference_listener(listener)
    return detailed


class XmlEquivalenceMatcher:
    """
    Matches XmlValues that are equivalent to an expected value.

    The comparison is configured by a set of Setting toggles. Unless
    ONLY_COMPARE_SIMILARITY is set the documents have to be identical once
    the toggles are applied; with it they only have to be similar.

    Diff construction is pluggable through two strategies:

    - ``initialize_diff(expected, actual)`` builds the base Diff
    - ``configure_diff(diff, settings)`` augments it; replacements must keep
      every difference routed through the settings classifier (for example
      by delegating to ``classifying_diff``)

    Instances are immutable; ``enabling`` and ``disabling`` return new
    matchers.
    """

    def __init__(
        self,
        expected: XmlValue,
        settings: Iterable[Setting] = DEFAULT_SETTINGS,
        initialize_diff: Optional[InitializeDiff] = None,
        configure_diff: Optional[ConfigureDiff] = None
    ):
        if not isinstance(expected, XmlValue):
            raise TypeError(
                f"expected value must be an XmlValue, got {type(expected).__name__}"
            )
        self._expected = expected
        self._settings = frozenset(settings)
        self._initialize_diff = initialize_diff or default_initialize_diff
        self._configure_diff = configure_diff or classifying_diff

    @staticmethod
    def default_settings() -> frozenset:
        return DEFAULT_SETTINGS

    @classmethod
    def default_matcher_for(cls, expected: XmlValue) -> "XmlEquivalenceMatcher":
        """Create a matcher for ``expected`` using the default settings."""
        return cls(expected, DEFAULT_SETTINGS)

    @property
    def expected(self) -> XmlValue:
        return self._expected

    @property
    def settings(self) -> frozenset:
        return self._settings

    def enabling(self, *settings: Setting) -> "XmlEquivalenceMatcher":
        """Copy of this matcher with the given settings enabled."""
        if not settings:
            return self
        return self._derive(self._settings | frozenset(settings))

    def disabling(self, *settings: Setting) -> "XmlEquivalenceMatcher":
        """Copy of this matcher with the given settings disabled."""
        if not settings:
            return self
        return self._derive(self._settings - frozenset(settings))

    def _derive(self, settings: frozenset) -> "XmlEquivalenceMatcher":
        return type(self)(
            self._expected,
            settings,
            initialize_diff=self._initialize_diff,
            configure_diff=self._configure_diff,
        )

    def describe_to(self, description: Description) -> None:
        comparison = (
            "similar" if Setting.ONLY_COMPARE_SIMILARITY in self._settings
            else "identical"
        )
        description.append_text(f"XML content {comparison} to ")
        description.append_description_of(self._expected)

    def matches(self, item: Any, mismatch_description: Optional[Description] = None) -> bool:
        """
        Compare ``item`` against the expected value.

        Args:
            item: The actual XmlValue
            mismatch_description: Receives the diagnostic when there is no match

        Returns:
            True if the documents are equivalent under this matcher's settings
        """
        if not isinstance(item, XmlValue):
            if mismatch_description is not None:
                mismatch_description.append_text(f"was {type(item).__name__} {item!r}")
            return False
        return self._matches_value(item, mismatch_description)

    def describe_mismatch(self, item: Any, mismatch_description: Description) -> None:
        self.matches(item, mismatch_description)

    def _matches_value(
        self,
        actual: XmlValue,
        mismatch_description: Optional[Description]
    ) -> bool:
        with EngineContext(self._settings):
            diff = self._initialize_diff(self._expected, actual)
            diff = self._configure_diff(diff, self._settings)

            if Setting.ONLY_COMPARE_SIMILARITY in self._settings:
                success = diff.similar()
            else:
                success = diff.identical()

            if not success and mismatch_description is not None:
                mismatch_description.append_text(diff.message())
                mismatch_description.append_text("\n")
                mismatch_description.append_description_of(actual)

        logger.debug("XML comparison against %r %s", self._expected,
                     "matched" if success else "did not match")
        return success

    def __str__(self) -> str:
        description = Description()
        self.describe_to(description)
        return str(description)

    def __repr__(self) -> str:
        names = sorted(s.name for s in self._settings)
        return f"XmlEquivalenceMatcher({self._expected!r}, {names})"
