"""Tests for XML values."""

import datetime
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from urllib.parse import urlparse

import pytest
from xmatch import (
    MarshallingError,
    XmlSourceError,
    XmlValue,
    marshal_object,
    xml_at,
    xml_bytes,
    xml_for_object,
    xml_resource,
    xml_text,
)
from xmatch.differ import parse_document


class Colour(Enum):
    RED = "red"


@dataclass
class Item:
    name: str
    count: int = 1


@dataclass
class Event:
    day: datetime.date
    at: datetime.datetime
    amount: Decimal
    ref: uuid.UUID
    item: Item


@dataclass
class Order:
    __xml_root__ = "order"

    id: int
    paid: bool
    colour: Colour
    items: List[Item] = field(default_factory=list)
    note: Optional[str] = None


class TestXmlValue:
    """Test value behavior shared by every source."""

    def test_fresh_input_per_call(self):
        """Test every get() returns an independent, unread stream."""
        value = xml_text("<a>1</a>")
        first = value.get()
        second = value.get()

        assert first is not second
        assert first.read() == "<a>1</a>"
        assert second.read() == "<a>1</a>"

    def test_same_value_on_both_sides(self):
        """Test one value can be parsed twice."""
        value = xml_bytes(b"<a>1</a>")
        assert parse_document(value.get()).toxml() == parse_document(value.get()).toxml()

    def test_str_with_description(self):
        """Test the description comes before the display text."""
        value = XmlValue.from_text("<a/>", "somewhere", "display")
        assert str(value) == "somewhere:\ndisplay"

    def test_str_without_description(self):
        """Test the display text alone is used without a description."""
        value = XmlValue.from_text("<a/>")
        assert str(value) == "<a/>"
        assert value.source_description is None

    def test_bytes_are_copied(self):
        """Test later changes to the caller's buffer are not seen."""
        data = bytearray(b"<a>1</a>")
        value = xml_bytes(data)
        data[3:4] = b"2"
        assert value.get().read() == b"<a>1</a>"

    def test_bytes_display_text_is_pretty(self):
        """Test byte values display indented XML."""
        value = xml_bytes(b"<a><b>1</b></a>")
        assert value.value_text == "<a>\n  <b>1</b>\n</a>\n"
        assert value.source_description == "XML bytes"

    def test_invalid_bytes(self):
        """Test bytes that are not XML cannot be displayed."""
        with pytest.raises(XmlSourceError):
            xml_bytes(b"<a>")

    def test_display_text_keeps_prolog(self):
        """Test top-level comments and the doctype are shown."""
        value = xml_bytes(b"<!DOCTYPE a><!--generated--><a><b>1</b></a>")
        assert value.value_text.startswith("<!DOCTYPE a>")
        assert "<!--generated-->" in value.value_text
        assert "<b>1</b>" in value.value_text


class TestLocations:
    """Test values read from paths and URLs."""

    def test_path(self, tmp_path):
        """Test reading from a pathlib.Path."""
        path = tmp_path / "doc.xml"
        path.write_text("<doc><item>1</item></doc>")

        value = xml_at(path)

        assert value.get().read() == b"<doc><item>1</item></doc>"
        assert value.source_description == f'XML document at URL "{path.resolve().as_uri()}"'
        assert "<item>1</item>" in value.value_text

    def test_path_string_and_parsed_url(self, tmp_path):
        """Test plain path strings and parsed file URLs."""
        path = tmp_path / "doc.xml"
        path.write_text("<doc/>")

        assert xml_at(str(path)).get().read() == b"<doc/>"
        assert xml_at(urlparse(path.resolve().as_uri())).get().read() == b"<doc/>"

    def test_missing_file(self, tmp_path):
        """Test I/O failures are wrapped."""
        with pytest.raises(XmlSourceError) as exc_info:
            xml_at(tmp_path / "missing.xml")
        assert "I/O exception occurred" in str(exc_info.value)

    def test_malformed_url(self):
        """Test malformed URLs are wrapped."""
        with pytest.raises(XmlSourceError) as exc_info:
            xml_at("http://[not-a-host/doc.xml")
        assert "malformed URL" in str(exc_info.value)

    def test_not_a_location(self):
        """Test unsupported location types are rejected."""
        with pytest.raises(XmlSourceError):
            xml_at(42)

    def test_missing_resource(self):
        """Test a missing package resource is wrapped."""
        with pytest.raises(XmlSourceError):
            xml_resource("xmatch", "no-such-document.xml")


class TestMarshalling:
    """Test values built from objects."""

    def test_marshal_dataclass(self):
        """Test fields, nesting, lists, enums and booleans."""
        order = Order(7, True, Colour.RED, [Item("pen"), Item("ink", 2)])
        document = parse_document(marshal_object(order))
        root = document.documentElement

        assert root.tagName == "order"
        assert [n.tagName for n in root.getElementsByTagName("items")] == ["items", "items"]
        assert root.getElementsByTagName("paid")[0].firstChild.data == "true"
        assert root.getElementsByTagName("colour")[0].firstChild.data == "red"
        assert root.getElementsByTagName("count")[1].firstChild.data == "2"
        assert root.getElementsByTagName("note") == []

    def test_root_defaults_to_class_name(self):
        """Test classes without __xml_root__ use their own name."""
        assert marshal_object(Item("pen")).startswith("<Item>")

    def test_description(self):
        """Test marshalled values name the object type."""
        value = xml_for_object(Item("pen"))
        assert value.source_description == "marshalled object of type Item"

    def test_custom_marshaller(self):
        """Test a caller supplied marshaller is used."""
        value = xml_for_object(object(), lambda obj: b"<custom/>")
        assert value.get().read() == b"<custom/>"

    def test_marshaller_failure(self):
        """Test marshaller errors are wrapped."""
        def broken(obj):
            raise RuntimeError("no mapping")

        with pytest.raises(MarshallingError) as exc_info:
            xml_for_object(Item("pen"), broken)
        assert exc_info.value.type_name == "Item"
        assert "no mapping" in str(exc_info.value)

    def test_unmarshallable_object(self):
        """Test objects without fields cannot be marshalled."""
        with pytest.raises(MarshallingError):
            xml_for_object(3)

    def test_marshal_scalar_fields(self):
        """Test dates, decimals and UUIDs are rendered as text."""
        event = Event(
            day=datetime.date(2020, 1, 2),
            at=datetime.datetime(2020, 1, 2, 3, 4, 5),
            amount=Decimal("12.50"),
            ref=uuid.UUID("12345678-1234-5678-1234-567812345678"),
            item=Item("pen"),
        )
        root = parse_document(marshal_object(event)).documentElement

        assert root.getElementsByTagName("day")[0].firstChild.data == "2020-01-02"
        assert root.getElementsByTagName("at")[0].firstChild.data == "2020-01-02T03:04:05"
        assert root.getElementsByTagName("amount")[0].firstChild.data == "12.50"
        assert root.getElementsByTagName("ref")[0].firstChild.data == (
            "12345678-1234-5678-1234-567812345678"
        )
        assert root.getElementsByTagName("name")[0].firstChild.data == "pen"

    def test_marshaller_returning_other_types(self):
        """Test marshaller results that are not text or bytes are rejected."""
        with pytest.raises(MarshallingError) as exc_info:
            xml_for_object(Item("pen"), lambda obj: None)
        assert "marshaller returned NoneType" in str(exc_info.value)
