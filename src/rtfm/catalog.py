"""Build the command catalog from man and tldr listings."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .errors import FetchError, StartupError
from .logging import log_event
from .models import CommandEntry, SourceKind
from .providers import DocumentProvider

# "name (1) - description" or "a, b (8) - description"
_APROPOS_RE = re.compile(r"^(?P<names>.+?)\s*\((?P<section>\d)[^)]*\)\s+-+\s*(?P<desc>.*)$")


@dataclass
class _Builder:
    name: str
    sections: set[int] = field(default_factory=set)
    sources: set[SourceKind] = field(default_factory=set)
    description: str = ""

    def freeze(self) -> CommandEntry:
        return CommandEntry(
            self.name,
            frozenset(self.sections),
            frozenset(self.sources),
            self.description,
        )


def _merge(catalog: dict[str, _Builder], name: str) -> _Builder:
    builder = catalog.get(name)
    if builder is None:
        builder = _Builder(name)
        catalog[name] = builder
    return builder


def _parse_apropos_into(catalog: dict[str, _Builder], text: str) -> None:
    for line in text.splitlines():
        match = _APROPOS_RE.match(line.strip())
        if match is None:
            continue
        section = int(match.group("section"))
        description = match.group("desc").strip()
        for name in match.group("names").split(","):
            name = name.strip()
            if not name or any(c.isspace() for c in name):
                continue
            builder = _merge(catalog, name)
            builder.sections.add(section)
            builder.sources.add(SourceKind.MAN)
            if not builder.description:
                builder.description = description


def _parse_tldr_into(catalog: dict[str, _Builder], text: str) -> None:
    for chunk in re.split(r"[\n,]", text):
        name = chunk.strip()
        if not name or any(c.isspace() for c in name):
            continue
        _merge(catalog, name).sources.add(SourceKind.TLDR)


def parse_apropos(text: str) -> list[CommandEntry]:
    """Parse ``man -k .`` output into entries sorted by name.

    Sections of a repeated name are merged; the first description wins.
    Lines that do not parse are skipped.
    """
    catalog: dict[str, _Builder] = {}
    _parse_apropos_into(catalog, text)
    return [catalog[name].freeze() for name in sorted(catalog)]


def parse_tldr_list(text: str) -> list[str]:
    """Parse ``tldr --list`` output (newline or comma separated)."""
    catalog: dict[str, _Builder] = {}
    _parse_tldr_into(catalog, text)
    return sorted(catalog)


def merge_listings(apropos_text: str, tldr_text: str = "") -> list[CommandEntry]:
    """Merge both listings into one entry per command name."""
    catalog: dict[str, _Builder] = {}
    _parse_apropos_into(catalog, apropos_text)
    _parse_tldr_into(catalog, tldr_text)
    return [catalog[name].freeze() for name in sorted(catalog)]


async def load_catalog(provider: DocumentProvider) -> list[CommandEntry]:
    """Load command entries from the provider's listings.

    Raises:
        StartupError: If the man page listing cannot be produced or is empty
    """
    try:
        apropos_text = await provider.list_man_pages()
    except FetchError as e:
        raise StartupError(f"Cannot list man pages: {e}") from e

    try:
        tldr_text = await provider.list_tldr_pages()
    except FetchError as e:
        log_event(
            "fetch_error",
            level=logging.WARNING,
            source=SourceKind.TLDR,
            error_type=e.kind,
            error=str(e),
        )
        tldr_text = ""

    entries = merge_listings(apropos_text, tldr_text)
    if not entries:
        raise StartupError("No commands found: man -k . produced no usable entries")
    return entries
