"""DOM tree diffing driven by a process-wide engine configuration.

The engine's configuration is module state shared by every comparison in the
process, and it is read while a diff is evaluated rather than when the diff
is built. Callers that need a particular configuration must hold an
``xmatch.context.EngineContext`` for the whole build-and-evaluate window.
"""

from __future__ import annotations

import re
from dataclasses import fields, replace
from typing import Any, Optional
from xml.dom import Node, XMLNS_NAMESPACE
from xml.parsers.expat import ExpatError

from defusedxml import minidom as defused_minidom
from defusedxml.common import DefusedXmlException

from .exceptions import XmlParseError
from .models import (
    Difference,
    DifferenceKind,
    EngineConfig,
    NodeDetail,
    Verdict,
)


_CONFIG = EngineConfig()
_FLAG_NAMES = tuple(f.name for f in fields(EngineConfig))

_WHITESPACE_RUN = re.compile(r"\s+")

_NODE_TYPE_NAMES = {
    Node.ELEMENT_NODE: "element",
    Node.TEXT_NODE: "text",
    Node.CDATA_SECTION_NODE: "CDATA section",
    Node.COMMENT_NODE: "comment",
    Node.PROCESSING_INSTRUCTION_NODE: "processing instruction",
    Node.DOCUMENT_TYPE_NODE: "doctype",
}

_CHARACTER_DATA_KINDS = {
    Node.TEXT_NODE: DifferenceKind.TEXT_VALUE,
    Node.CDATA_SECTION_NODE: DifferenceKind.CDATA_VALUE,
    Node.COMMENT_NODE: DifferenceKind.COMMENT_VALUE,
}


def engine_flag_names() -> tuple[str, ...]:
    return _FLAG_NAMES


def engine_flag(name: str) -> bool:
    """Read one global engine flag."""
    if name not in _FLAG_NAMES:
        raise KeyError(f"Unknown engine flag: {name}")
    return getattr(_CONFIG, name)


def set_engine_flag(name: str, value: bool) -> None:
    """Overwrite one global engine flag."""
    if name not in _FLAG_NAMES:
        raise KeyError(f"Unknown engine flag: {name}")
    setattr(_CONFIG, name, bool(value))


def engine_config() -> EngineConfig:
    """Snapshot of the current global engine configuration."""
    return replace(_CONFIG)


def parse_document(source: Any):
    """
    Turn engine input into a DOM document.

    Args:
        source: A DOM document (returned as is), a readable stream, str or bytes

    Returns:
        The parsed minidom Document
    """
    if getattr(source, "nodeType", None) == Node.DOCUMENT_NODE:
        return source

    try:
        if isinstance(source, (str, bytes)):
            return defused_minidom.parseString(source)
        return defused_minidom.parse(source)
    except ExpatError as e:
        raise XmlParseError(
            f"Unable to parse XML: {e}",
            line=getattr(e, "lineno", None),
            column=getattr(e, "offset", None),
        ) from e
    except DefusedXmlException as e:
        raise XmlParseError(f"Refusing to parse XML: {e}") from e


class Diff:
    """
    Comparison of a control document against a test document.

    The comparison is evaluated on first use of ``identical()``, ``similar()``,
    ``differences`` or ``message()`` using the engine configuration in effect
    at that moment, and cached until the difference listener is replaced.

    A listener is any object with ``difference_found(difference) -> Verdict``.
    It is consulted for every difference before the engine's own handling:
    EQUIVALENT drops the difference, SIMILAR_ONLY breaks identity only, and
    REJECT leaves the engine default (breaks similarity too, unless the kind
    is recoverable). Without a listener every difference is a REJECT.
    """

    def __init__(self, control: Any, test: Any, halt_on_difference: bool = True):
        self.control_document = parse_document(control)
        self.test_document = parse_document(test)
        self.halt_on_difference = halt_on_difference
        self._listener = None
        self._walker: Optional[_DocumentWalker] = None

    @property
    def listener(self):
        return self._listener

    def override_difference_listener(self, listener) -> None:
        self._listener = listener
        self._walker = None

    def identical(self) -> bool:
        return self._evaluate().identical

    def similar(self) -> bool:
        return self._evaluate().similar

    @property
    def differences(self) -> list[Difference]:
        return [difference for difference, _ in self._evaluate().records]

    def append_message(self, lines: list[str]) -> list[str]:
        """Append one line per recorded difference to ``lines``."""
        records = self._evaluate().records
        if not records:
            lines.append("[identical]")
        for difference, breaks_similarity in records:
            prefix = "[different]" if breaks_similarity else "[not identical]"
            lines.append(f"{prefix} {difference}")
        return lines

    def message(self) -> str:
        return "\n".join(self.append_message([]))

    def _evaluate(self) -> "_DocumentWalker":
        if self._walker is None:
            config = engine_config()
            walker = _DocumentWalker(config, self._listener, self.halt_on_difference)
            walker.walk(
                _prepare(self.control_document, config),
                _prepare(self.test_document, config),
            )
            self._walker = walker
        return self._walker

    def __str__(self) -> str:
        return f"{type(self).__name__}\n{self.message()}"


class DetailedDiff(Diff):
    """Diff that never halts, so every difference is collected."""

    def __init__(self, prototype: Diff):
        super().__init__(
            prototype.control_document,
            prototype.test_document,
            halt_on_difference=False,
        )
        self._listener = prototype.listener

    def all_differences(self) -> list[Difference]:
        return self.differences


class _DocumentWalker:
    """Walks two prepared documents in parallel, reporting differences."""

    def __init__(self, config: EngineConfig, listener, halt_on_difference: bool):
        self.config = config
        self.listener = listener
        self.halt_on_difference = halt_on_difference

        self.records: list[tuple[Difference, bool]] = []
        self.identical = True
        self.similar = True
        self._aborted = False

    def walk(self, control, test) -> None:
        self._compare_doctypes(control, test)
        self._compare_children(control, test, "", "")

    def _compare_doctypes(self, control, test) -> None:
        control_doctype = control.doctype
        test_doctype = test.doctype

        if (control_doctype is None) != (test_doctype is None):
            self._report(
                DifferenceKind.HAS_DOCTYPE_DECLARATION,
                control_doctype is not None,
                test_doctype is not None,
                control, test, "/", "/"
            )
            return

        if control_doctype is None:
            return

        for kind, attribute in (
            (DifferenceKind.DOCTYPE_NAME, "name"),
            (DifferenceKind.DOCTYPE_PUBLIC_ID, "publicId"),
            (DifferenceKind.DOCTYPE_SYSTEM_ID, "systemId"),
        ):
            control_value = getattr(control_doctype, attribute)
            test_value = getattr(test_doctype, attribute)
            if control_value != test_value:
                self._report(
                    kind, control_value, test_value,
                    control_doctype, test_doctype, "/", "/"
                )

    def _compare_children(self, control, test, control_xpath: str, test_xpath: str) -> None:
        control_children = _child_nodes(control)
        test_children = _child_nodes(test)

        if bool(control_children) != bool(test_children):
            self._report(
                DifferenceKind.HAS_CHILD_NODES,
                bool(control_children), bool(test_children),
                control, test, control_xpath or "/", test_xpath or "/"
            )
        elif len(control_children) != len(test_children):
            self._report(
                DifferenceKind.CHILD_NODELIST_LENGTH,
                len(control_children), len(test_children),
                control, test, control_xpath or "/", test_xpath or "/"
            )

        control_paths = _child_xpaths(control_xpath, control_children)
        test_paths = _child_xpaths(test_xpath, test_children)

        for i, (control_child, test_child) in enumerate(zip(control_children, test_children)):
            if self._aborted:
                return
            self._compare_nodes(control_child, test_child, control_paths[i], test_paths[i])

        for i in range(len(test_children), len(control_children)):
            if self._aborted:
                return
            child = control_children[i]
            self._report(
                DifferenceKind.CHILD_NODE_NOT_FOUND,
                child.nodeName, None,
                child, None, control_paths[i], None
            )

        for i in range(len(control_children), len(test_children)):
            if self._aborted:
                return
            child = test_children[i]
            self._report(
                DifferenceKind.CHILD_NODE_NOT_FOUND,
                None, child.nodeName,
                None, child, None, test_paths[i]
            )

    def _compare_nodes(self, control, test, control_xpath: str, test_xpath: str) -> None:
        if control.nodeType != test.nodeType:
            self._report(
                DifferenceKind.NODE_TYPE,
                _NODE_TYPE_NAMES.get(control.nodeType, control.nodeType),
                _NODE_TYPE_NAMES.get(test.nodeType, test.nodeType),
                control, test, control_xpath, test_xpath
            )
            return

        node_type = control.nodeType
        if node_type == Node.ELEMENT_NODE:
            self._compare_elements(control, test, control_xpath, test_xpath)
        elif node_type in _CHARACTER_DATA_KINDS:
            self._compare_character_data(
                _CHARACTER_DATA_KINDS[node_type],
                control, test, control_xpath, test_xpath
            )
        elif node_type == Node.PROCESSING_INSTRUCTION_NODE:
            self._compare_processing_instructions(control, test, control_xpath, test_xpath)

    def _compare_elements(self, control, test, control_xpath: str, test_xpath: str) -> None:
        if control.namespaceURI != test.namespaceURI:
            self._report(
                DifferenceKind.NAMESPACE_URI,
                control.namespaceURI, test.namespaceURI,
                control, test, control_xpath, test_xpath
            )
        if control.prefix != test.prefix:
            self._report(
                DifferenceKind.NAMESPACE_PREFIX,
                control.prefix, test.prefix,
                control, test, control_xpath, test_xpath
            )
        if control.localName != test.localName:
            self._report(
                DifferenceKind.ELEMENT_TAG_NAME,
                control.localName, test.localName,
                control, test, control_xpath, test_xpath
            )

        if self._aborted:
            return
        self._compare_attributes(control, test, control_xpath, test_xpath)

        if self._aborted:
            return
        self._compare_children(control, test, control_xpath, test_xpath)

    def _compare_attributes(self, control, test, control_xpath: str, test_xpath: str) -> None:
        control_attrs = _attributes(control)
        test_attrs = _attributes(test)

        if len(control_attrs) != len(test_attrs):
            self._report(
                DifferenceKind.ELEMENT_NUM_ATTRIBUTES,
                len(control_attrs), len(test_attrs),
                control, test, control_xpath, test_xpath
            )

        test_positions = {_attribute_key(attr): i for i, attr in enumerate(test_attrs)}
        control_keys = set()

        for i, attr in enumerate(control_attrs):
            if self._aborted:
                return

            key = _attribute_key(attr)
            control_keys.add(key)
            control_attr_xpath = f"{control_xpath}/@{attr.name}"

            j = test_positions.get(key)
            if j is None:
                self._report(
                    DifferenceKind.ATTR_NAME_NOT_FOUND,
                    attr.name, None,
                    control, test, control_attr_xpath, test_xpath
                )
                continue

            other = test_attrs[j]
            test_attr_xpath = f"{test_xpath}/@{other.name}"

            if attr.prefix != other.prefix:
                self._report(
                    DifferenceKind.NAMESPACE_PREFIX,
                    attr.prefix, other.prefix,
                    control, test, control_attr_xpath, test_attr_xpath
                )
            if self._attribute_value(attr) != self._attribute_value(other):
                self._report(
                    DifferenceKind.ATTR_VALUE,
                    attr.value, other.value,
                    control, test, control_attr_xpath, test_attr_xpath
                )
            if not self.config.ignore_attribute_order and i != j:
                self._report(
                    DifferenceKind.ATTR_SEQUENCE,
                    i, j,
                    control, test, control_attr_xpath, test_attr_xpath
                )

        for attr in test_attrs:
            if self._aborted:
                return
            if _attribute_key(attr) not in control_keys:
                self._report(
                    DifferenceKind.ATTR_NAME_NOT_FOUND,
                    None, attr.name,
                    control, test, control_xpath, f"{test_xpath}/@{attr.name}"
                )

    def _compare_character_data(
        self,
        kind: DifferenceKind,
        control,
        test,
        control_xpath: str,
        test_xpath: str
    ) -> None:
        if self._text_value(control.data) != self._text_value(test.data):
            self._report(
                kind, control.data, test.data,
                control, test, control_xpath, test_xpath
            )

    def _compare_processing_instructions(
        self,
        control,
        test,
        control_xpath: str,
        test_xpath: str
    ) -> None:
        if control.target != test.target:
            self._report(
                DifferenceKind.PROCESSING_INSTRUCTION_TARGET,
                control.target, test.target,
                control, test, control_xpath, test_xpath
            )
        if control.data != test.data:
            self._report(
                DifferenceKind.PROCESSING_INSTRUCTION_DATA,
                control.data, test.data,
                control, test, control_xpath, test_xpath
            )

    def _text_value(self, value: str) -> str:
        if self.config.normalize_whitespace:
            return _WHITESPACE_RUN.sub(" ", value).strip()
        if self.config.ignore_whitespace:
            return value.strip()
        return value

    def _attribute_value(self, attr) -> str:
        return self._text_value(attr.value)

    def _report(
        self,
        kind: DifferenceKind,
        control_value: Any,
        test_value: Any,
        control_node: Any,
        test_node: Any,
        control_xpath: Optional[str],
        test_xpath: Optional[str]
    ) -> None:
        """Route a difference through the listener and record the outcome."""
        difference = Difference(
            kind=kind,
            control=NodeDetail(control_value, control_node, control_xpath),
            test=NodeDetail(test_value, test_node, test_xpath),
        )

        verdict = Verdict.REJECT
        if self.listener is not None:
            verdict = self.listener.difference_found(difference)

        if verdict is Verdict.EQUIVALENT:
            return

        breaks_similarity = verdict is Verdict.REJECT and not difference.recoverable
        self.records.append((difference, breaks_similarity))
        self.identical = False

        if breaks_similarity:
            self.similar = False
            if self.halt_on_difference:
                self._aborted = True


def _prepare(document, config: EngineConfig):
    """Copy of ``document`` rewritten according to the engine configuration."""
    document = document.cloneNode(True)

    if config.ignore_comments:
        _remove_nodes(document, lambda node: node.nodeType == Node.COMMENT_NODE)

    if config.ignore_diff_between_text_and_cdata:
        _cdata_to_text(document, document)
        document.normalize()

    if config.normalize:
        document.normalize()

    if config.ignore_whitespace:
        _remove_nodes(document, _is_blank_text)

    return document


def _remove_nodes(parent, predicate) -> None:
    for child in list(parent.childNodes):
        if predicate(child):
            parent.removeChild(child)
        elif child.nodeType == Node.ELEMENT_NODE:
            _remove_nodes(child, predicate)


def _cdata_to_text(document, parent) -> None:
    for child in list(parent.childNodes):
        if child.nodeType == Node.CDATA_SECTION_NODE:
            parent.replaceChild(document.createTextNode(child.data), child)
        elif child.nodeType == Node.ELEMENT_NODE:
            _cdata_to_text(document, child)


def _is_blank_text(node) -> bool:
    return node.nodeType == Node.TEXT_NODE and not node.data.strip()


def _child_nodes(node) -> list:
    return [
        child for child in node.childNodes
        if child.nodeType != Node.DOCUMENT_TYPE_NODE
    ]


def _xpath_step(node) -> str:
    node_type = node.nodeType
    if node_type == Node.ELEMENT_NODE:
        return node.nodeName
    if node_type in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE):
        return "text()"
    if node_type == Node.COMMENT_NODE:
        return "comment()"
    if node_type == Node.PROCESSING_INSTRUCTION_NODE:
        return "processing-instruction()"
    return "node()"


def _child_xpaths(parent_xpath: str, children: list) -> list[str]:
    counters: dict[str, int] = {}
    paths = []
    for child in children:
        step = _xpath_step(child)
        counters[step] = counters.get(step, 0) + 1
        paths.append(f"{parent_xpath}/{step}[{counters[step]}]")
    return paths


def _is_namespace_declaration(attr) -> bool:
    return (
        attr.namespaceURI == XMLNS_NAMESPACE
        or attr.name == "xmlns"
        or attr.name.startswith("xmlns:")
    )


def _attributes(element) -> list:
    return [
        attr for attr in element.attributes.values()
        if not _is_namespace_declaration(attr)
    ]


def _attribute_key(attr) -> tuple:
    return (attr.namespaceURI, attr.localName)
