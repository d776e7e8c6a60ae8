"""Shared fixtures: a small ISCED-F scheme served from canned Turtle."""
import json

import pytest

from isced_fields.errors import FetchError
from isced_fields.skos import NodeHandle

BASE = "http://data.europa.eu/snb/isced-f/"
SCHEME = BASE + "25831c2"

PREFIXES = (
    "@prefix skos: <http://www.w3.org/2004/02/skos/core#> .\n"
    "@prefix dc: <http://purl.org/dc/elements/1.1/> .\n"
)


def _labels(labels):
    return ", ".join(f"{json.dumps(text)}@{lang}" for lang, text in labels.items())


def _concept(code, labels, extra=""):
    lines = [f'<{BASE}{code}> dc:identifier "{code}"']
    if labels:
        lines.append(f"skos:prefLabel {_labels(labels)}")
    if extra:
        lines.append(extra)
    return " ;\n    ".join(lines) + " .\n"


def build_graphs(scheme_labels, broad, self_loops=()):
    """Render one Turtle document per resource, the way the service does.

    ``broad`` maps code -> (labels, {narrow code -> (labels, {detailed code -> labels})}).
    Narrow codes listed in ``self_loops`` also assert themselves as skos:broader.
    """
    graphs = {}

    scheme_doc = PREFIXES + f"<{SCHEME}> a skos:ConceptScheme ; skos:prefLabel {_labels(scheme_labels)}"
    scheme_doc += "".join(f" ;\n    skos:hasTopConcept <{BASE}{code}>" for code in broad) + " .\n"
    for code in broad:
        scheme_doc += f"<{BASE}{code}> skos:topConceptOf <{SCHEME}> .\n"
    graphs[SCHEME] = scheme_doc

    for broad_code, (broad_labels, narrows) in broad.items():
        doc = PREFIXES + _concept(broad_code, broad_labels, f"skos:topConceptOf <{SCHEME}>")
        for narrow_code in narrows:
            doc += f"<{BASE}{narrow_code}> skos:broader <{BASE}{broad_code}> .\n"
        graphs[BASE + broad_code] = doc

        for narrow_code, (narrow_labels, detaileds) in narrows.items():
            doc = PREFIXES + _concept(narrow_code, narrow_labels, f"skos:broader <{BASE}{broad_code}>")
            if narrow_code in self_loops:
                doc += f"<{BASE}{narrow_code}> skos:broader <{BASE}{narrow_code}> .\n"
            for detailed_code in detaileds:
                doc += f"<{BASE}{detailed_code}> skos:broader <{BASE}{narrow_code}> .\n"
            graphs[BASE + narrow_code] = doc

            for detailed_code, detailed_labels in detaileds.items():
                doc = PREFIXES + _concept(detailed_code, detailed_labels, f"skos:broader <{BASE}{narrow_code}>")
                graphs[BASE + detailed_code] = doc

    return graphs


class FakeFetcher:
    """Serves canned Turtle documents instead of hitting the network."""

    def __init__(self, graphs):
        self.graphs = graphs
        self.requests_made = 0
        self.fetched = []

    def fetch(self, uri):
        self.requests_made += 1
        self.fetched.append(uri)
        if uri not in self.graphs:
            raise FetchError(uri, "404 Client Error: Not Found")
        return NodeHandle.parse(uri, self.graphs[uri].encode("utf-8"), "text/turtle")


ENGINEERING = {
    "07": (
        {"en": "Engineering", "fr": "Ingénierie, industries de transformation et construction"},
        {
            "071": (
                {"en": "Engineering trades", "fr": "Ingénierie et techniques apparentées"},
                {"0711": {"en": "Chemical engineering", "fr": "Génie chimique"}},
            ),
        },
    ),
}


@pytest.fixture
def scheme_uri():
    return SCHEME


@pytest.fixture
def make_fetcher():
    """Factory: make_fetcher(scheme_labels, broad, self_loops=()) -> FakeFetcher."""
    def factory(scheme_labels, broad, self_loops=()):
        return FakeFetcher(build_graphs(scheme_labels, broad, self_loops))
    return factory


@pytest.fixture
def engineering_fetcher(make_fetcher):
    return make_fetcher({"en": "ISCED-F 2013", "fr": "CITE-F 2013"}, ENGINEERING)


@pytest.fixture
def turtle():
    """Prefix-complete Turtle from a body."""
    def render(body):
        return (PREFIXES + body).encode("utf-8")
    return render
