"""
Build per-language message tables from the harvested labels.

The English label is the msgid in every language, so two codes sharing an
English label collapse into one entry; the localized text of the one visited
last wins.
"""
from __future__ import annotations

import logging

from .errors import MissingLabelError
from .harvest import Taxonomy

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "en"


def extract_translations(taxonomy: Taxonomy) -> dict[str, dict[str, str]]:
    """Map language -> English label -> localized label.

    The scheme's own labels come first, then every node top-down in code
    order. Dict insertion order is the order a msgid was first seen.

    Raises:
        MissingLabelError: A visited label set has no English entry.
    """
    translations: dict[str, dict[str, str]] = {}

    def add(code: str, labels: dict[str, str]) -> None:
        if SOURCE_LANGUAGE not in labels:
            raise MissingLabelError(code, SOURCE_LANGUAGE)
        msgid = labels[SOURCE_LANGUAGE]
        for lang, text in labels.items():
            translations.setdefault(lang, {})[msgid] = text

    add(taxonomy.uri, taxonomy.labels)
    for _level, node, _parents in taxonomy.walk():
        add(node.code, node.labels)

    return translations


def count_translations(translations: dict[str, dict[str, str]]) -> int:
    """Total number of (language, msgid) entries."""
    return sum(len(entries) for entries in translations.values())


def to_messages(translations: dict[str, dict[str, str]]) -> dict[str, list[dict[str, str]]]:
    """Turn the nested mapping into ordered ``{"msgid", "msgstr"}`` lists."""
    return {
        lang: [{"msgid": msgid, "msgstr": msgstr} for msgid, msgstr in entries.items()]
        for lang, entries in translations.items()
    }


def replicate_locales(
    messages: dict[str, list[dict[str, str]]],
    copies: dict[str, list[str]],
) -> dict[str, list[dict[str, str]]]:
    """Copy each source language's messages to its dialect codes.

    Targets that already exist are overwritten. The input is left untouched.

    Example:
        >>> replicate_locales({"pt": msgs}, {"pt": ["pt_PT"]})
        {'pt': msgs, 'pt_PT': msgs}
    """
    result = dict(messages)
    for source, targets in copies.items():
        if source not in messages:
            logger.warning("No messages for %s, skipping copies to %s", source, ", ".join(targets))
            continue
        for target in targets:
            if target in result:
                logger.debug("Overwriting %s with copy of %s", target, source)
            result[target] = [dict(entry) for entry in messages[source]]
    return result
