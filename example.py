"""Example usage of xmatch."""

from dataclasses import dataclass
from typing import List

from xmatch import (
    DetailedDiff,
    Diff,
    Setting,
    XmlEquivalenceMatcher,
    assert_that,
    equivalent_to,
    is_marshalled_object,
    is_xml_text,
    xml_text,
)
from xmatch.description import Description


@dataclass
class LineItem:
    sku: str
    quantity: int


@dataclass
class Invoice:
    __xml_root__ = "invoice"

    id: str
    status: str
    lineItems: List[LineItem]


# Response from the legacy system: attributes reordered, a comment, padded text
legacy_response = """
<invoice id="INV-001" xmlns:old="urn:billing" old:currency="EUR">
  <!-- generated by billing v1 -->
  <status>   PAID   </status>
  <lineItem sku="WIDGET-001" quantity="5"/>
  <lineItem sku="GADGET-002" quantity="2"/>
</invoice>
"""

# Response from the new system
new_response = """
<invoice xmlns:new="urn:billing" new:currency="EUR" id="INV-001">
  <status>PAID</status>
  <lineItem quantity="5" sku="WIDGET-001"/>
  <lineItem quantity="2" sku="GADGET-002"/>
</invoice>
"""


def main():
    print("=" * 60)
    print("xmatch - Example")
    print("=" * 60)

    # Default settings ignore formatting noise
    matcher = equivalent_to(legacy_response)
    print(f"\nMatcher: {matcher}")
    print(f"Match: {matcher.matches(xml_text(new_response))}")

    # Same comparison without the lax settings
    strict = matcher.disabling(
        Setting.IGNORE_COMMENTS,
        Setting.IGNORE_ATTRIBUTE_ORDER,
        Setting.TOLERATE_DIFFERENT_NAMESPACE_PREFIXES,
    )
    description = Description()
    print(f"\nStrict match: {strict.matches(xml_text(new_response), description)}")
    print(f"Mismatch:\n{description}")


def example_with_mismatch():
    """Example that demonstrates a failing assertion."""
    print("\n" + "=" * 60)
    print("Example with Mismatch")
    print("=" * 60)

    mismatched = new_response.replace('quantity="2"', 'quantity="3"')
    try:
        assert_that(mismatched, is_xml_text(equivalent_to(legacy_response)))
    except AssertionError as e:
        print(f"\n{e}")


def example_with_objects():
    """Example comparing a marshalled object against expected XML."""
    print("\n" + "=" * 60)
    print("Example with Marshalled Objects")
    print("=" * 60)

    invoice = Invoice("INV-001", "PAID", [LineItem("WIDGET-001", 5)])
    expected = """
    <invoice>
      <id>INV-001</id>
      <status> PAID </status>
      <lineItems><sku>WIDGET-001</sku><quantity>5</quantity></lineItems>
    </invoice>
    """
    assert_that(invoice, is_marshalled_object(equivalent_to(expected)))
    print("\nMarshalled invoice matches")


def example_with_detailed_diff():
    """Example listing every difference between two documents."""
    print("\n" + "=" * 60)
    print("Example with Detailed Diff")
    print("=" * 60)

    diff = DetailedDiff(Diff(
        "<test type='first'><a n='1'>first</a><c>ONE</c></test>",
        "<test><a n='2'>second</a><c>TWO</c></test>",
    ))
    print(f"\nIdentical: {diff.identical()}")
    print(f"\nDifferences:")
    for difference in diff.all_differences():
        print(f"  - [{difference.kind.name}] {difference.control.xpath or difference.test.xpath}")
        print(f"    {difference}")

    similar_only = XmlEquivalenceMatcher(
        xml_text("<a><!--one-->x</a>"), {Setting.ONLY_COMPARE_SIMILARITY}
    )
    print(f"\nSimilar despite comments: {similar_only.matches(xml_text('<a><!--two-->x</a>'))}")


if __name__ == "__main__":
    main()
    example_with_mismatch()
    example_with_objects()
    example_with_detailed_diff()
