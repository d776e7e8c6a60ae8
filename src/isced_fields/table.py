"""
Flatten a harvested Taxonomy into the code-indexed lookup table.

Every broad, narrow and detailed code gets one record carrying its English
label and the codes of its ancestry path:

    "0711": {"label": "Chemical engineering and processes",
             "broad": "07", "narrow": "071", "detailed": "0711"}
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from .errors import HarvestError, MissingLabelError
from .harvest import DETAILED, NARROW, Taxonomy

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class FlatRecord:
    label: str
    broad: str
    narrow: str | None = None
    detailed: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> FlatRecord:
        return cls(
            label=d["label"],
            broad=d["broad"],
            narrow=d.get("narrow"),
            detailed=d.get("detailed"),
        )


def flatten(taxonomy: Taxonomy) -> dict[str, FlatRecord]:
    """Build the lookup table, ordered by code.

    Raises:
        MissingLabelError: A node has no English label.
        HarvestError: The same code appears twice in the tree.
    """
    table: dict[str, FlatRecord] = {}

    for level, node, parents in taxonomy.walk():
        if DEFAULT_LANGUAGE not in node.labels:
            raise MissingLabelError(node.code, DEFAULT_LANGUAGE)
        if node.code in table:
            raise HarvestError(f"Duplicate code {node.code} at {node.uri}")

        path = [p.code for p in parents] + [node.code]
        table[node.code] = FlatRecord(
            label=node.labels[DEFAULT_LANGUAGE],
            broad=path[0],
            narrow=path[1] if level in (NARROW, DETAILED) else None,
            detailed=path[2] if level == DETAILED else None,
        )

    return dict(sorted(table.items()))


def save_table(table: dict[str, FlatRecord], path: Path) -> None:
    """Write the table as JSON, codes ascending."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {code: record.to_dict() for code, record in sorted(table.items())}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")
    logger.info("Wrote %d fields of study to %s", len(data), path)


def load_table(path: Path) -> dict[str, FlatRecord]:
    """Read a table written by save_table."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return {code: FlatRecord.from_dict(record) for code, record in data.items()}
