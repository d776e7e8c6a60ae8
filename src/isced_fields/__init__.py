"""
isced-fields - ISCED-F fields of study, harvested from the EU linked-data service

Features:
- Harvest the broad/narrow/detailed hierarchy one SKOS resource at a time
- Flatten it into a code-indexed lookup table
- Build gettext catalogs for every language the scheme is labelled in
"""

from ._version import __version__
from .errors import FetchError, HarvestError, MissingLabelError, MissingPropertyError
from .fields import FieldsOfStudy
from .harvest import HierarchyNode, Taxonomy, TreeBuilder
from .skos import NodeFetcher, NodeHandle, collect_labels
from .table import FlatRecord, flatten, load_table, save_table
from .translations import extract_translations, replicate_locales, to_messages

__all__ = [
    "__version__",
    "HarvestError",
    "FetchError",
    "MissingPropertyError",
    "MissingLabelError",
    "NodeFetcher",
    "NodeHandle",
    "collect_labels",
    "TreeBuilder",
    "Taxonomy",
    "HierarchyNode",
    "FlatRecord",
    "flatten",
    "save_table",
    "load_table",
    "extract_translations",
    "to_messages",
    "replicate_locales",
    "FieldsOfStudy",
]
