"""Write message tables as gettext PO catalogs."""
from __future__ import annotations

import io
import logging
from pathlib import Path

from babel import Locale, UnknownLocaleError
from babel.messages.catalog import Catalog
from babel.messages.pofile import write_po

from ._version import __version__
from .translations import SOURCE_LANGUAGE

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "isced"


def _parse_locale(lang: str) -> Locale | None:
    try:
        return Locale.parse(lang)
    except (UnknownLocaleError, ValueError):
        # Still written, just without a Language header
        logger.debug("Babel has no locale data for %s", lang)
        return None


def render_catalog(lang: str, messages: list[dict[str, str]], domain: str = DEFAULT_DOMAIN) -> bytes:
    """Render one language's messages as a PO file, in the given order."""
    catalog = Catalog(
        locale=_parse_locale(lang),
        domain=domain,
        project="isced-fields",
        version=__version__,
        charset="utf-8",
        fuzzy=False,
    )
    for entry in messages:
        catalog.add(entry["msgid"], entry["msgstr"])

    buf = io.BytesIO()
    write_po(buf, catalog, width=0, omit_header=False)
    return buf.getvalue()


def render_catalogs(
    messages: dict[str, list[dict[str, str]]],
    domain: str = DEFAULT_DOMAIN,
) -> dict[str, bytes]:
    """Render every language but English, whose msgids are its translations."""
    return {
        lang: render_catalog(lang, entries, domain)
        for lang, entries in messages.items()
        if lang != SOURCE_LANGUAGE
    }


def write_catalogs(
    catalogs: dict[str, bytes],
    directory: Path,
    domain: str = DEFAULT_DOMAIN,
) -> list[Path]:
    """Write rendered catalogs to ``<directory>/<lang>/LC_MESSAGES/<domain>.po``."""
    written = []
    for lang, content in catalogs.items():
        target_dir = Path(directory) / lang / "LC_MESSAGES"
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"{domain}.po"
        path.write_bytes(content)
        written.append(path)
    logger.info("Wrote %d catalogs to %s", len(written), directory)
    return written
