"""
xmatch - Semantic XML equivalence matching for tests

Compares an actual XML document against an expected one under a configurable
notion of equivalence (attribute order, comments, CDATA, whitespace,
namespace prefixes), while serializing access to the diff engine's shared
global configuration.
"""

from .models import (
    Setting,
    DEFAULT_SETTINGS,
    Verdict,
    DifferenceKind,
    Difference,
    NodeDetail,
    EngineConfig,
)
from .classifier import (
    classify,
    ConfigurableDifferenceListener,
)
from .differ import (
    Diff,
    DetailedDiff,
    parse_document,
)
from .context import (
    EngineContext,
    engine_context_held,
)
from .values import (
    XmlValue,
    xml_text,
    xml_bytes,
    xml_at,
    xml_resource,
    xml_for_object,
    marshal_object,
)
from .matcher import (
    XmlEquivalenceMatcher,
    classifying_diff,
    default_initialize_diff,
)
from .matchers import (
    equivalent_to,
    similar_to,
    is_xml,
    is_xml_text,
    is_marshalled_object,
    assert_that,
)
from .description import Description
from .config import (
    load_profiles,
    load_profile,
    parse_profile,
)
from .exceptions import (
    XmatchError,
    XmlSourceError,
    XmlParseError,
    MarshallingError,
    EngineContextError,
    ConfigError,
)

__version__ = "1.0.0"
__all__ = [
    # Settings and classification
    "Setting",
    "DEFAULT_SETTINGS",
    "Verdict",
    "classify",
    "ConfigurableDifferenceListener",
    # Diff engine
    "Diff",
    "DetailedDiff",
    "parse_document",
    "DifferenceKind",
    "Difference",
    "NodeDetail",
    "EngineConfig",
    # Engine configuration context
    "EngineContext",
    "engine_context_held",
    # XML values
    "XmlValue",
    "xml_text",
    "xml_bytes",
    "xml_at",
    "xml_resource",
    "xml_for_object",
    "marshal_object",
    # Matching
    "XmlEquivalenceMatcher",
    "classifying_diff",
    "default_initialize_diff",
    "equivalent_to",
    "similar_to",
    "is_xml",
    "is_xml_text",
    "is_marshalled_object",
    "assert_that",
    "Description",
    # Profiles
    "load_profiles",
    "load_profile",
    "parse_profile",
    # Errors
    "XmatchError",
    "XmlSourceError",
    "XmlParseError",
    "MarshallingError",
    "EngineContextError",
    "ConfigError",
]
