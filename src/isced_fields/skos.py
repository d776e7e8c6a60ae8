"""
SKOS access for the ISCED-F scheme.

Each concept of the scheme is published as its own linked-data resource.
NodeFetcher retrieves one resource over HTTP, parses the returned RDF into an
in-memory Oxigraph store and hands back a NodeHandle that answers the few
SPARQL questions the harvest needs.

Example:
    >>> from isced_fields.skos import NodeFetcher, collect_labels
    >>> fetcher = NodeFetcher()
    >>> node = fetcher.fetch("http://data.europa.eu/snb/isced-f/07")
    >>> node.identifier
    '07'
    >>> collect_labels(node)["en"]
    'Engineering, manufacturing and construction'
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator

import pyoxigraph
import requests

from .errors import FetchError, MissingPropertyError

logger = logging.getLogger(__name__)

SKOS = "http://www.w3.org/2004/02/skos/core#"
DC = "http://purl.org/dc/elements/1.1/"

SKOS_PREF_LABEL = SKOS + "prefLabel"
SKOS_HAS_TOP_CONCEPT = SKOS + "hasTopConcept"
SKOS_TOP_CONCEPT_OF = SKOS + "topConceptOf"
SKOS_BROADER = SKOS + "broader"
DC_IDENTIFIER = DC + "identifier"

DEFAULT_TIMEOUT = 30.0
DEFAULT_MIN_DELAY = 0.005

ACCEPT_HEADER = "text/turtle, application/rdf+xml;q=0.9, application/n-triples;q=0.8"


class NodeHandle:
    """Read-only view over the graph fetched for one resource.

    Example:
        >>> node = NodeHandle.parse(uri, turtle_bytes, "text/turtle")
        >>> node.subjects_with(SKOS_BROADER, uri)
        ['http://data.europa.eu/snb/isced-f/0711']
    """

    def __init__(self, uri: str, store: pyoxigraph.Store):
        self.uri = uri
        self._store = store

    @classmethod
    def parse(cls, uri: str, data: bytes, media_type: str) -> NodeHandle:
        """Parse an RDF document describing ``uri``.

        Args:
            uri: The resource the document was fetched for (also the base IRI).
            data: Raw response body.
            media_type: Content type, parameters allowed ("text/turtle; charset=utf-8").

        Raises:
            FetchError: Unknown media type, unparsable body, or a graph that
                says nothing about ``uri``.
        """
        mime = media_type.split(";")[0].strip().lower()
        rdf_format = pyoxigraph.RdfFormat.from_media_type(mime) if mime else None
        if rdf_format is None:
            raise FetchError(uri, f"unsupported content type '{media_type}'")

        store = pyoxigraph.Store()
        try:
            store.load(data, rdf_format, base_iri=uri)
        except (SyntaxError, ValueError) as e:
            raise FetchError(uri, f"malformed RDF: {e}") from e

        node = cls(uri, store)
        if not node._describes_subject():
            raise FetchError(uri, "response does not describe the requested resource")
        return node

    def __len__(self) -> int:
        """Return number of triples in the fetched graph."""
        return len(self._store)

    def query(self, sparql: str) -> list[dict]:
        """Execute a SPARQL SELECT query against the fetched graph.

        Returns:
            List of result bindings (dicts mapping variable names to
            ``{"value": ..., "lang": ...}``).
        """
        query_results = self._store.query(sparql)
        variables = query_results.variables

        results = []
        for solution in query_results:
            row = {}
            for var in variables:
                value = solution[var]
                if value is not None:
                    row[var.value] = {"value": value.value}
                    if getattr(value, "language", None):
                        row[var.value]["lang"] = value.language
            results.append(row)
        return results

    def about(self, uri: str) -> NodeHandle:
        """A handle for another resource described in the same graph."""
        return NodeHandle(uri, self._store)

    def _describes_subject(self) -> bool:
        return bool(self.query(f"SELECT ?p WHERE {{ <{self.uri}> ?p ?o }} LIMIT 1"))

    @property
    def identifier(self) -> str:
        """The short stable code (dc:identifier), e.g. "0711"."""
        values = self.objects_of(DC_IDENTIFIER)
        if not values:
            raise MissingPropertyError(self.uri, "dc:identifier")
        return values[0]

    def objects_of(self, predicate: str) -> list[str]:
        """Values of ``<uri> predicate ?o``, in result order."""
        rows = self.query(f"SELECT ?o WHERE {{ <{self.uri}> <{predicate}> ?o }}")
        return [r["o"]["value"] for r in rows if "o" in r]

    def subjects_with(self, predicate: str, obj: str) -> list[str]:
        """URIs of resources asserting ``?s predicate <obj>``, deduplicated."""
        rows = self.query(f"SELECT ?s WHERE {{ ?s <{predicate}> <{obj}> . FILTER(isIRI(?s)) }}")
        return list(dict.fromkeys(r["s"]["value"] for r in rows))

    def subjects_having(self, predicate: str) -> list[str]:
        """URIs of resources that carry ``predicate`` at all."""
        rows = self.query(f"SELECT ?s WHERE {{ ?s <{predicate}> ?o . FILTER(isIRI(?s)) }}")
        return list(dict.fromkeys(r["s"]["value"] for r in rows))

    def pref_labels(self) -> Iterator[tuple[str, str]]:
        """Yield ``(lang, text)`` for each language-tagged skos:prefLabel."""
        rows = self.query(
            f"SELECT ?label WHERE {{ <{self.uri}> <{SKOS_PREF_LABEL}> ?label . FILTER(isLiteral(?label)) }}"
        )
        for r in rows:
            label = r["label"]
            if label.get("lang"):
                yield label["lang"], label["value"]


def collect_labels(node: NodeHandle) -> dict[str, str]:
    """Collect a node's preferred labels, keyed by language code.

    Untagged literals are ignored. The result is ordered by language code so
    downstream output is deterministic.
    """
    labels: dict[str, str] = {}
    for lang, text in node.pref_labels():
        labels[lang] = text
    return dict(sorted(labels.items()))


class NodeFetcher:
    """Fetch SKOS resources one at a time, politely.

    Every fetch but the first is preceded by a ``min_delay`` second pause.
    There are no retries: any failure is a FetchError and ends the harvest.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        min_delay: float = DEFAULT_MIN_DELAY,
        session: requests.Session | None = None,
    ):
        """Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds. Expiry is a FetchError.
            min_delay: Seconds to wait before each fetch after the first.
            session: Optional requests session (a new one is created otherwise).
        """
        self.timeout = timeout
        self.min_delay = min_delay
        self.session = session or requests.Session()
        self.requests_made = 0

    def _throttle(self) -> None:
        # Every fetch after the first waits the full delay, however slow the last one was
        if self.requests_made:
            time.sleep(self.min_delay)

    def fetch(self, uri: str) -> NodeHandle:
        """Retrieve and parse the resource at ``uri``.

        Raises:
            FetchError: Network failure, timeout, HTTP error status, or a
                response that is not a usable RDF description of ``uri``.
        """
        self._throttle()
        self.requests_made += 1
        logger.info("Fetching %s", uri)

        try:
            response = self.session.get(uri, headers={"Accept": ACCEPT_HEADER}, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(uri, f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise FetchError(uri, str(e)) from e

        media_type = response.headers.get("Content-Type", "")
        node = NodeHandle.parse(uri, response.content, media_type)
        logger.debug("Fetched %s (%d triples)", uri, len(node))
        return node
