"""XML values that can be matched by an ``XmlEquivalenceMatcher``.

An ``XmlValue`` produces a fresh engine input stream every time ``get()`` is
called, so one value can sit on both sides of a comparison or be reused for
any number of matches. It also carries a short description of where the XML
came from and display text for failure messages.
"""

from __future__ import annotations

import dataclasses
import io
import logging
from collections.abc import Mapping
from datetime import date, time
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Optional, Union
from urllib.error import URLError
from urllib.parse import ParseResult, SplitResult, urlparse
from urllib.request import urlopen

from lxml import etree

from .exceptions import MarshallingError, XmlSourceError

logger = logging.getLogger(__name__)


class XmlValue:
    """Immutable, repeatable source of XML plus diagnostic text."""

    __slots__ = ("_supplier", "_source_description", "_value_text")

    def __init__(
        self,
        source_description: Optional[str],
        value_text: str,
        supplier: Callable[[], Any]
    ):
        """
        Args:
            source_description: Where the XML came from, or None
            value_text: Text shown for this value in failure messages
            supplier: Zero-argument callable returning a new engine input
                each time it is called
        """
        self._supplier = supplier
        self._source_description = source_description
        self._value_text = value_text

    @classmethod
    def from_text(
        cls,
        xml_text: str,
        source_description: Optional[str] = None,
        value_text: Optional[str] = None
    ) -> "XmlValue":
        text = str(xml_text)
        return cls(
            source_description,
            text if value_text is None else value_text,
            lambda: io.StringIO(text),
        )

    @classmethod
    def from_bytes(
        cls,
        xml_bytes: bytes,
        source_description: Optional[str] = None,
        value_text: Optional[str] = None
    ) -> "XmlValue":
        data = bytes(xml_bytes)
        if value_text is None:
            value_text = data.decode("utf-8", errors="replace")
        return cls(source_description, value_text, lambda: io.BytesIO(data))

    @property
    def source_description(self) -> Optional[str]:
        return self._source_description

    @property
    def value_text(self) -> str:
        return self._value_text

    def get(self):
        """Return a new, independent engine input for this value."""
        return self._supplier()

    def describe_to(self, description) -> None:
        description.append_text(str(self))

    def __str__(self) -> str:
        if self._source_description is not None:
            return f"{self._source_description}:\n{self._value_text}"
        return self._value_text

    def __repr__(self) -> str:
        return f"XmlValue({self._source_description!r})"


def pretty_xml(data: Union[str, bytes]) -> str:
    """
    Render XML as indented text for display.

    Args:
        data: The XML document as text or bytes

    Returns:
        The pretty-printed document
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    # lxml parsers must not be shared between threads
    parser = etree.XMLParser(
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise XmlSourceError(
            f"Unable to render XML as pretty text due to a parse error: {e}"
        ) from e
    return etree.tostring(root.getroottree(), pretty_print=True, encoding="unicode")


def xml_text(text: str) -> XmlValue:
    """Value for a literal XML string."""
    text = str(text)
    return XmlValue.from_text(text, "XML text", text)


def xml_bytes(data: bytes, source_description: str = "XML bytes") -> XmlValue:
    """Value for raw XML bytes; the bytes are copied."""
    data = bytes(data)
    return XmlValue.from_bytes(data, source_description, pretty_xml(data))


def _location_url(location: Any) -> str:
    if isinstance(location, Path):
        return location.resolve().as_uri()
    if isinstance(location, (ParseResult, SplitResult)):
        return location.geturl()
    if isinstance(location, str):
        scheme = urlparse(location).scheme
        # no scheme, or a single-letter Windows drive
        if len(scheme) <= 1:
            return Path(location).resolve().as_uri()
        return location
    raise XmlSourceError(
        f"Unable to match XML at {location!r} because it is not a path or URL."
    )


def xml_at(location: Any) -> XmlValue:
    """
    Value for the XML document at a path or URL.

    The document is read fully into memory once; display text is the
    pretty-printed document.

    Args:
        location: A pathlib.Path, a filesystem path string, a URL string or a
            parsed URL (urllib.parse result)

    Returns:
        The XmlValue for the document
    """
    try:
        url = _location_url(location)
    except ValueError as e:
        raise XmlSourceError(
            f"Unable to match XML at {location!r} because it represents a malformed URL."
        ) from e
    logger.debug("Reading XML document from %s", url)

    try:
        with urlopen(url) as response:
            data = response.read()
    except ValueError as e:
        raise XmlSourceError(
            f'Unable to match XML at "{url}" because it represents a malformed URL.',
            source=url,
        ) from e
    except (URLError, OSError) as e:
        raise XmlSourceError(
            f"I/O exception occurred while reading from URL: {url}",
            source=url,
        ) from e

    return XmlValue.from_bytes(data, f'XML document at URL "{url}"', pretty_xml(data))


def xml_resource(package: Any, name: str) -> XmlValue:
    """Value for an XML file shipped as a package resource."""
    try:
        data = resources.files(package).joinpath(name).read_bytes()
    except (ImportError, OSError, TypeError) as e:
        raise XmlSourceError(
            f"Unable to load XML resource {name!r} from package {package}",
            source=name,
        ) from e

    return XmlValue.from_bytes(
        data,
        f'XML resource "{name}" in package {package}',
        pretty_xml(data),
    )


def xml_for_object(
    obj: Any,
    marshaller: Optional[Callable[[Any], Union[str, bytes]]] = None
) -> XmlValue:
    """
    Value for the XML produced by marshalling an object.

    Args:
        obj: The object to marshal
        marshaller: Callable turning the object into XML text or bytes
            (defaults to ``marshal_object``)

    Returns:
        The XmlValue for the marshalled document
    """
    type_name = type(obj).__qualname__
    marshal = marshaller or marshal_object

    try:
        xml = marshal(obj)
    except MarshallingError:
        raise
    except Exception as e:
        raise MarshallingError(type_name, str(e)) from e

    description = f"marshalled object of type {type_name}"
    if isinstance(xml, bytes):
        return XmlValue.from_bytes(xml, description)
    if isinstance(xml, str):
        return XmlValue.from_text(xml, description)
    raise MarshallingError(type_name, f"marshaller returned {type(xml).__name__}")


def marshal_object(obj: Any) -> str:
    """
    Map a dataclass (or plain object, or mapping) to XML text.

    The root element is named after the class unless the class defines
    ``__xml_root__``. Each field becomes a child element, lists and tuples
    become repeated elements, nested objects nest, and None fields are left
    out.
    """
    root_name = getattr(type(obj), "__xml_root__", None) or type(obj).__name__
    root = etree.Element(root_name)
    _append_fields(root, obj)
    return etree.tostring(root, pretty_print=True, encoding="unicode")


def _object_fields(obj: Any) -> list[tuple[str, Any]]:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    if isinstance(obj, Mapping):
        return [(str(key), value) for key, value in obj.items()]
    try:
        attributes = vars(obj)
    except TypeError:
        raise MarshallingError(
            type(obj).__qualname__, "object has no fields that can be marshalled"
        )
    return [(key, value) for key, value in attributes.items() if not key.startswith("_")]


def _append_fields(element, obj: Any) -> None:
    for name, value in _object_fields(obj):
        _append_value(element, name, value)


def _append_value(parent, name: str, value: Any) -> None:
    if value is None:
        return

    if isinstance(value, (list, tuple)):
        for item in value:
            _append_value(parent, name, item)
        return

    child = etree.SubElement(parent, name)
    if isinstance(value, bool):
        child.text = "true" if value else "false"
    elif isinstance(value, Enum):
        child.text = str(value.value)
    elif isinstance(value, (date, time)):
        child.text = value.isoformat()
    elif _has_fields(value):
        _append_fields(child, value)
    else:
        child.text = str(value)


def _has_fields(value: Any) -> bool:
    if isinstance(value, (str, bytes)):
        return False
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return isinstance(value, Mapping) or hasattr(value, "__dict__")
