"""
Read-only access to the ISCED-F lookup table.

Build one FieldsOfStudy at startup and pass it to whatever needs it:

    >>> fields = FieldsOfStudy.from_file("data/isced.json")
    >>> fields.label("0711")
    'Chemical engineering and processes'
    >>> fields.broad("0711"), fields.narrow("0711")
    ('07', '071')
"""
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from .table import FlatRecord, load_table


class FieldsOfStudy:
    """Immutable view over a flat table of fields of study."""

    def __init__(self, table: Mapping[str, FlatRecord]):
        self._table = MappingProxyType(dict(sorted(table.items())))

    @classmethod
    def from_file(cls, path: Path | str) -> FieldsOfStudy:
        return cls(load_table(Path(path)))

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, code: object) -> bool:
        return code in self._table

    def codes(self) -> list[str]:
        return list(self._table)

    def exists(self, code: str) -> bool:
        return code in self._table

    def get(self, code: str) -> FlatRecord:
        """Return the record for ``code``.

        Raises:
            KeyError: Unknown code.
        """
        try:
            return self._table[code]
        except KeyError:
            raise KeyError(f"Code {code} does not exist") from None

    def label(self, code: str) -> str:
        return self.get(code).label

    def labels(self) -> dict[str, str]:
        """English label per code."""
        return {code: record.label for code, record in self._table.items()}

    def broad(self, code: str) -> str:
        return self.get(code).broad

    def narrow(self, code: str) -> str | None:
        return self.get(code).narrow

    def detailed(self, code: str) -> str | None:
        return self.get(code).detailed

    def is_broad(self, code: str) -> bool:
        return code == self.broad(code)

    def is_narrow(self, code: str) -> bool:
        return code == self.narrow(code)

    def is_detailed(self, code: str) -> bool:
        return code == self.detailed(code)

    def children(self, code: str) -> list[str]:
        """Codes one level below ``code``, ascending."""
        if self.is_broad(code):
            return [c for c, r in self._table.items() if r.broad == code and c == r.narrow]
        if self.is_narrow(code):
            return [c for c, r in self._table.items() if r.narrow == code and c == r.detailed]
        return []

    def tree(self) -> dict[str, dict[str, dict[str, None]]]:
        """Nested ``broad -> narrow -> detailed -> None`` mapping."""
        tree: dict = {}
        for code, record in self._table.items():
            if code == record.broad:
                tree.setdefault(code, {})
            elif code == record.narrow:
                tree.setdefault(record.broad, {}).setdefault(code, {})
            elif code == record.detailed:
                tree.setdefault(record.broad, {}).setdefault(record.narrow, {})[code] = None
        return tree
