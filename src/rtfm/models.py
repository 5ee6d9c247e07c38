"""Typed domain models for rtfm."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from rtfm.constants import CACHE_CAPACITY, DEBOUNCE_MS, DEFAULT_SECTION
from rtfm.errors import FetchError


class SourceKind(str, Enum):
    """Where a document comes from."""

    MAN = "man"
    TLDR = "tldr"

    @property
    def other(self) -> "SourceKind":
        """Return the opposite source kind (man <-> tldr)."""
        return SourceKind.TLDR if self is SourceKind.MAN else SourceKind.MAN

    @property
    def label(self) -> str:
        return self.value.upper()


class StyleTag(str, Enum):
    """Presentation class of a span of document text."""

    PLAIN = "plain"
    HEADING = "heading"
    FLAG = "flag"
    PLACEHOLDER = "placeholder"
    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    QUOTE = "quote"
    LINK = "link"


@dataclass(frozen=True, slots=True)
class CommandEntry:
    """One indexed command name with the sections/sources it is known in."""

    name: str
    sections: frozenset[int] = field(default_factory=frozenset)
    sources: frozenset[SourceKind] = field(default_factory=frozenset)
    description: str = ""

    def preferred_section(self, default: int) -> int:
        """Return default if available, else the lowest known section."""
        if default in self.sections or not self.sections:
            return default
        return min(self.sections)


@dataclass(frozen=True, slots=True)
class DocumentKey:
    """Cache and fetch-dedup key; equality is structural."""

    command: str
    section: int
    source: SourceKind

    def with_source(self, source: SourceKind) -> "DocumentKey":
        return DocumentKey(self.command, self.section, source)

    def describe(self) -> str:
        if self.source is SourceKind.TLDR:
            return f"tldr {self.command}"
        return f"{self.command}({self.section})"


@dataclass(frozen=True, slots=True)
class Span:
    """A run of text sharing one style."""

    text: str
    style: StyleTag = StyleTag.PLAIN


@dataclass(frozen=True, slots=True)
class StyledLine:
    """Ordered spans making up one display line."""

    spans: tuple[Span, ...] = ()

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)

    @classmethod
    def plain(cls, text: str) -> "StyledLine":
        return cls((Span(text),) if text else ())


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    """Immutable parsed document shared by the cache and the current view."""

    lines: tuple[StyledLine, ...] = ()
    source: SourceKind = SourceKind.MAN
    raw: bool = False

    def __len__(self) -> int:
        return len(self.lines)

    @classmethod
    def from_plain_text(
        cls,
        text: str | Iterable[str],
        source: SourceKind = SourceKind.MAN,
        *,
        raw: bool = False,
    ) -> "ParsedDocument":
        """Build an unstyled document, one plain span per line."""
        lines = text.splitlines() if isinstance(text, str) else list(text)
        return cls(tuple(StyledLine.plain(line) for line in lines), source, raw)


@dataclass(frozen=True, slots=True)
class Match:
    """One search hit within the displayed document."""

    line_index: int
    start_offset: int
    end_offset: int


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Typed outcome delivered to every waiter of one fetch."""

    key: DocumentKey
    document: Optional[ParsedDocument] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None


@dataclass
class AppConfig:
    """In-memory runtime configuration."""

    default_section: int = DEFAULT_SECTION
    debounce_ms: int = DEBOUNCE_MS
    cache_capacity: int = CACHE_CAPACITY
    fetch_timeout_sec: Optional[float] = None
    auto_preview: bool = True
    man_width: Optional[int] = None
    logs_dir: Optional[str] = None
    config_path: Optional[str] = None

    @property
    def debounce_sec(self) -> float:
        return self.debounce_ms / 1000

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AppConfig":
        """Create config from a validated dict payload."""
        defaults = cls()
        timeout = payload.get("fetch_timeout_sec", defaults.fetch_timeout_sec)
        return cls(
            default_section=int(payload.get("default_section", defaults.default_section)),
            debounce_ms=int(payload.get("debounce_ms", defaults.debounce_ms)),
            cache_capacity=int(payload.get("cache_capacity", defaults.cache_capacity)),
            fetch_timeout_sec=None if timeout is None else float(timeout),
            auto_preview=bool(payload.get("auto_preview", defaults.auto_preview)),
            man_width=payload.get("man_width", defaults.man_width),
            logs_dir=payload.get("logs_dir", defaults.logs_dir),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize config to a dict payload."""
        return {
            "default_section": self.default_section,
            "debounce_ms": self.debounce_ms,
            "cache_capacity": self.cache_capacity,
            "fetch_timeout_sec": self.fetch_timeout_sec,
            "auto_preview": self.auto_preview,
            "man_width": self.man_width,
            "logs_dir": self.logs_dir,
        }
