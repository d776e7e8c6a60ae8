"""
Rebuild the ISCED-F hierarchy from its linked-data resources.

The scheme has three working levels below its root:

    scheme (root)
      broad     "07"    Engineering, manufacturing and construction
        narrow   "071"  Engineering and engineering trades
          detailed "0711" Chemical engineering and processes

TreeBuilder walks them top-down, one fetch per concept, and returns a
Taxonomy whose children mappings are all in ascending code order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import MissingPropertyError
from .skos import SKOS_BROADER, SKOS_HAS_TOP_CONCEPT, SKOS_TOP_CONCEPT_OF, NodeHandle, collect_labels

if TYPE_CHECKING:
    from .skos import NodeFetcher

logger = logging.getLogger(__name__)

BROAD = "broad"
NARROW = "narrow"
DETAILED = "detailed"

@dataclass
class HierarchyNode:
    """One concept of the scheme. Detailed nodes have no children."""

    code: str
    uri: str
    labels: dict[str, str] = field(default_factory=dict)
    children: dict[str, HierarchyNode] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: dict = {"uri": self.uri, "labels": dict(self.labels)}
        if self.children:
            d["children"] = {code: child.to_dict() for code, child in self.children.items()}
        return d


@dataclass
class Taxonomy:
    """The harvested scheme: its own labels plus the broad fields below it."""

    uri: str
    labels: dict[str, str] = field(default_factory=dict)
    broad: dict[str, HierarchyNode] = field(default_factory=dict)

    def walk(self):
        """Yield ``(level, node, parents)`` top-down in code order.

        ``parents`` is the tuple of ancestor nodes, broad first.
        """
        for broad in self.broad.values():
            yield BROAD, broad, ()
            for narrow in broad.children.values():
                yield NARROW, narrow, (broad,)
                for detailed in narrow.children.values():
                    yield DETAILED, detailed, (broad, narrow)

    def to_dict(self) -> dict:
        return {
            "uri": self.uri,
            "labels": dict(self.labels),
            "broad": {code: node.to_dict() for code, node in self.broad.items()},
        }


@dataclass
class HarvestStats:
    requests: int = 0
    broad: int = 0
    narrow: int = 0
    detailed: int = 0
    skipped_self_loops: int = 0


def sort_children(children: dict[str, HierarchyNode]) -> dict[str, HierarchyNode]:
    """Return ``children`` re-keyed in ascending code order."""
    return dict(sorted(children.items()))


class TreeBuilder:
    """Harvest the scheme into a Taxonomy.

    Any error raised by the fetcher or by a node missing its identifier
    propagates unchanged; no partial tree is ever returned.
    """

    def __init__(self, fetcher: NodeFetcher):
        self.fetcher = fetcher
        self.stats = HarvestStats()

    def build(self, scheme_uri: str) -> Taxonomy:
        """Fetch the scheme at ``scheme_uri`` and every concept below it."""
        self.stats = HarvestStats()
        requests_before = self.fetcher.requests_made

        root = self.fetcher.fetch(scheme_uri)
        scheme = root.about(self._find_scheme(root))
        taxonomy = Taxonomy(uri=scheme.uri, labels=collect_labels(scheme))

        for broad_uri in root.subjects_with(SKOS_TOP_CONCEPT_OF, scheme.uri):
            broad_graph, broad = self._fetch_node(broad_uri)
            self.stats.broad += 1
            taxonomy.broad[broad.code] = broad

            for narrow_uri in self._narrower(broad_graph):
                narrow_graph, narrow = self._fetch_node(narrow_uri)
                self.stats.narrow += 1
                broad.children[narrow.code] = narrow

                for detailed_uri in self._narrower(narrow_graph):
                    _, detailed = self._fetch_node(detailed_uri)
                    self.stats.detailed += 1
                    narrow.children[detailed.code] = detailed

                narrow.children = sort_children(narrow.children)
            broad.children = sort_children(broad.children)
        taxonomy.broad = sort_children(taxonomy.broad)

        self.stats.requests = self.fetcher.requests_made - requests_before
        logger.info(
            "Harvested %d broad, %d narrow, %d detailed fields in %d requests",
            self.stats.broad, self.stats.narrow, self.stats.detailed, self.stats.requests,
        )
        return taxonomy

    def _find_scheme(self, root: NodeHandle) -> str:
        """The scheme is the resource asserting skos:hasTopConcept."""
        schemes = root.subjects_having(SKOS_HAS_TOP_CONCEPT)
        if not schemes:
            raise MissingPropertyError(root.uri, "skos:hasTopConcept")
        if root.uri in schemes:
            return root.uri
        return schemes[0]

    def _fetch_node(self, uri: str) -> tuple[NodeHandle, HierarchyNode]:
        graph = self.fetcher.fetch(uri)
        return graph, HierarchyNode(code=graph.identifier, uri=uri, labels=collect_labels(graph))

    def _narrower(self, parent: NodeHandle) -> list[str]:
        """Resources in the parent's graph that name it as skos:broader.

        The parent itself is dropped when it shows up as its own child.
        """
        children = []
        for uri in parent.subjects_with(SKOS_BROADER, parent.uri):
            if uri == parent.uri:
                logger.debug("Skipping self-reference of %s", parent.uri)
                self.stats.skipped_self_loops += 1
                continue
            children.append(uri)
        return children
