"""Data models for xmatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from xml.dom import Node


class Setting(Enum):
    """Toggles controlling the strictness of an XML comparison."""
    ONLY_COMPARE_SIMILARITY = "only_compare_similarity"
    IGNORE_ATTRIBUTE_ORDER = "ignore_attribute_order"
    IGNORE_COMMENTS = "ignore_comments"
    IGNORE_CDATA_TEXT_DISTINCTION = "ignore_cdata_text_distinction"
    IGNORE_LEADING_TRAILING_WHITESPACE = "ignore_leading_trailing_whitespace"
    TOLERATE_DIFFERENT_NAMESPACE_PREFIXES = "tolerate_different_namespace_prefixes"
    NORMALIZE_DOCUMENT = "normalize_document"
    NORMALIZE_WHITESPACE = "normalize_whitespace"


# Relatively lax: only the "content" of the documents is compared.
DEFAULT_SETTINGS = frozenset({
    Setting.IGNORE_ATTRIBUTE_ORDER,
    Setting.IGNORE_COMMENTS,
    Setting.IGNORE_CDATA_TEXT_DISTINCTION,
    Setting.IGNORE_LEADING_TRAILING_WHITESPACE,
    Setting.TOLERATE_DIFFERENT_NAMESPACE_PREFIXES,
    Setting.NORMALIZE_DOCUMENT,
    Setting.NORMALIZE_WHITESPACE,
})


class Verdict(Enum):
    EQUIVALENT = "EQUIVALENT"
    SIMILAR_ONLY = "SIMILAR_ONLY"
    REJECT = "REJECT"


class DifferenceKind(Enum):
    """Categories of structural discrepancy reported by the diff engine.

    Each member carries a description used in messages and a flag telling
    whether the engine, on its own, treats the difference as recoverable
    (nodes similar but not identical).
    """
    NODE_TYPE = (1, "node type", False)
    NAMESPACE_URI = (2, "namespace URI", False)
    NAMESPACE_PREFIX = (3, "namespace prefix", True)
    ELEMENT_TAG_NAME = (4, "element tag name", False)
    ELEMENT_NUM_ATTRIBUTES = (5, "number of element attributes", False)
    ATTR_NAME_NOT_FOUND = (6, "attribute name", False)
    ATTR_VALUE = (7, "attribute value", False)
    ATTR_SEQUENCE = (8, "sequence of attributes", True)
    TEXT_VALUE = (9, "text value", False)
    CDATA_VALUE = (10, "CDATA section value", False)
    COMMENT_VALUE = (11, "comment value", False)
    PROCESSING_INSTRUCTION_TARGET = (12, "processing instruction target", False)
    PROCESSING_INSTRUCTION_DATA = (13, "processing instruction data", False)
    HAS_CHILD_NODES = (14, "presence of child nodes to be", False)
    CHILD_NODELIST_LENGTH = (15, "number of child nodes", False)
    CHILD_NODE_NOT_FOUND = (16, "presence of child node", False)
    HAS_DOCTYPE_DECLARATION = (17, "presence of doctype declaration", False)
    DOCTYPE_NAME = (18, "doctype name", False)
    DOCTYPE_PUBLIC_ID = (19, "doctype public identifier", False)
    DOCTYPE_SYSTEM_ID = (20, "doctype system identifier", False)

    def __init__(self, code: int, description: str, recoverable: bool):
        self.code = code
        self.description = description
        self.recoverable = recoverable


@dataclass(frozen=True)
class NodeDetail:
    """One side of a difference."""
    value: Any
    node: Any = None
    xpath: Optional[str] = None

    def render(self) -> str:
        if self.node is None:
            return "<missing>"
        location = f" at {self.xpath}" if self.xpath else ""
        return f"{_summarise_node(self.node)}{location}"


@dataclass(frozen=True)
class Difference:
    """A single discrepancy found while walking two documents."""
    kind: DifferenceKind
    control: NodeDetail
    test: NodeDetail

    @property
    def recoverable(self) -> bool:
        return self.kind.recoverable

    def __str__(self) -> str:
        return (
            f"Expected {self.kind.description} {self.control.value!r} "
            f"but was {self.test.value!r} - comparing "
            f"{self.control.render()} to {self.test.render()}"
        )


@dataclass
class EngineConfig:
    """Global configuration of the diff engine."""
    ignore_attribute_order: bool = False
    ignore_comments: bool = False
    ignore_diff_between_text_and_cdata: bool = False
    ignore_whitespace: bool = False
    normalize: bool = False
    normalize_whitespace: bool = False


def _summarise_node(node: Any) -> str:
    """Short markup-like rendering of a DOM node for messages."""
    node_type = node.nodeType
    if node_type == Node.ELEMENT_NODE:
        attrs = "".join(
            f' {name}="{value}"' for name, value in node.attributes.items()
        )
        return f"<{node.tagName}{attrs}...>"
    if node_type == Node.TEXT_NODE:
        return repr(node.data)
    if node_type == Node.CDATA_SECTION_NODE:
        return f"<![CDATA[{node.data}]]>"
    if node_type == Node.COMMENT_NODE:
        return f"<!--{node.data}-->"
    if node_type == Node.PROCESSING_INSTRUCTION_NODE:
        return f"<?{node.target} {node.data}?>"
    if node_type == Node.DOCUMENT_TYPE_NODE:
        return f"<!DOCTYPE {node.name}>"
    if node_type == Node.DOCUMENT_NODE:
        return "<#document>"
    return repr(node)
