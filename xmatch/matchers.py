"""Factories and adapters for writing XML assertions in tests.

    from xmatch.matchers import assert_that, equivalent_to, is_xml_text

    assert_that("<foo>bar</foo>", is_xml_text(equivalent_to("<foo>\\nbar\\n</foo>")))
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, Union
from urllib.parse import ParseResult, SplitResult

from .description import Description
from .matcher import XmlEquivalenceMatcher
from .models import Setting
from .values import XmlValue, xml_at, xml_bytes, xml_for_object, xml_text


def _as_value(value: Union[XmlValue, str, bytes]) -> XmlValue:
    if isinstance(value, XmlValue):
        return value
    if isinstance(value, str):
        return xml_text(value)
    if isinstance(value, (bytes, bytearray)):
        return xml_bytes(value)
    raise TypeError(f"Cannot build an XML value from {type(value).__name__}")


def equivalent_to(value: Union[XmlValue, str, bytes]) -> XmlEquivalenceMatcher:
    """Matcher for documents identical to ``value`` under the default settings."""
    return XmlEquivalenceMatcher.default_matcher_for(_as_value(value))


def similar_to(value: Union[XmlValue, str, bytes]) -> XmlEquivalenceMatcher:
    """Matcher for documents similar to ``value`` under the default settings."""
    return XmlEquivalenceMatcher.default_matcher_for(_as_value(value)).enabling(
        Setting.ONLY_COMPARE_SIMILARITY
    )


class ConvertingMatcher:
    """Turns items into XmlValues before handing them to an XML matcher."""

    def __init__(
        self,
        matcher: XmlEquivalenceMatcher,
        convert: Callable[[Any], Optional[XmlValue]]
    ):
        self.matcher = matcher
        self._convert = convert

    def matches(self, item: Any, mismatch_description: Optional[Description] = None) -> bool:
        value = self._convert(item)
        if value is None:
            if mismatch_description is not None:
                mismatch_description.append_text(f"was {type(item).__name__} {item!r}")
            return False
        return self.matcher.matches(value, mismatch_description)

    def describe_to(self, description: Description) -> None:
        self.matcher.describe_to(description)

    def describe_mismatch(self, item: Any, mismatch_description: Description) -> None:
        self.matches(item, mismatch_description)


def _any_xml(item: Any) -> Optional[XmlValue]:
    if isinstance(item, XmlValue):
        return item
    if isinstance(item, str):
        return xml_text(item)
    if isinstance(item, (bytes, bytearray)):
        return xml_bytes(item)
    if isinstance(item, (Path, ParseResult, SplitResult)):
        return xml_at(item)
    return None


def _xml_text_only(item: Any) -> Optional[XmlValue]:
    if isinstance(item, str):
        return xml_text(item)
    return None


def is_xml(matcher: XmlEquivalenceMatcher) -> ConvertingMatcher:
    """Match XML given as text, bytes, a path, a parsed URL or an XmlValue."""
    return ConvertingMatcher(matcher, _any_xml)


def is_xml_text(matcher: XmlEquivalenceMatcher) -> ConvertingMatcher:
    """Match XML given as a string."""
    return ConvertingMatcher(matcher, _xml_text_only)


def is_marshalled_object(
    matcher: XmlEquivalenceMatcher,
    marshaller: Optional[Callable[[Any], Union[str, bytes]]] = None
) -> ConvertingMatcher:
    """Match objects by the XML they marshal to."""
    return ConvertingMatcher(matcher, lambda obj: xml_for_object(obj, marshaller))


def assert_that(actual: Any, matcher: Any, reason: str = "") -> None:
    """
    Raise AssertionError when ``actual`` does not satisfy ``matcher``.

    The message follows the usual "Expected: ... / but: ..." layout and
    carries the full list of differences.
    """
    if matcher.matches(actual):
        return

    description = Description()
    description.append_text(reason)
    description.append_text("\nExpected: ")
    description.append_description_of(matcher)
    description.append_text("\n     but: ")
    matcher.describe_mismatch(actual, description)
    description.append_text("\n")
    raise AssertionError(str(description))
