"""Path mapping utilities for special prefixes (~, @).

- ~ or ~/... -> user home directory
- @ or @/... -> package directory
- Absolute paths -> used as-is
- Relative paths without prefix -> error (to avoid ambiguity)
"""

from pathlib import Path
import unicodedata


def get_app_root() -> Path:
    """Return the installed `rtfm` package directory."""
    return Path(__file__).resolve().parent


def has_home_path_prefix(path: str) -> bool:
    """Return True when path uses the supported home prefix forms."""
    return path == "~" or path.startswith("~/") or path.startswith("~\\")


def has_app_path_prefix(path: str) -> bool:
    """Return True when path uses the supported app-root prefix forms."""
    return path == "@" or path.startswith("@/") or path.startswith("@\\")


def _normalize_path_input(path: str) -> str:
    """Normalize input text to NFC and reject NUL characters."""
    if "\x00" in path:
        raise ValueError("Path contains NUL character")
    return unicodedata.normalize("NFC", path)


def _resolve_under(root: Path, path: str, label: str) -> str:
    suffix = path[2:]
    resolved = (root / suffix).resolve()
    try:
        resolved.relative_to(root)
    except ValueError:
        raise ValueError(f"Path escapes {label} directory: {path}")
    return str(resolved)


def map_path(path: str) -> str:
    """Map path with special prefixes to an absolute path string.

    Raises:
        ValueError: If path is relative without a prefix or escapes its root
    """
    path = _normalize_path_input(path)

    if has_home_path_prefix(path):
        if path == "~":
            return str(Path.home().resolve())
        return _resolve_under(Path.home().resolve(), path, "home")

    if has_app_path_prefix(path):
        if path == "@":
            return str(get_app_root())
        return _resolve_under(get_app_root(), path, "app")

    if Path(path).is_absolute():
        return str(Path(path).resolve())

    raise ValueError(
        f"Relative paths without prefix are not supported: {path}\n"
        f"Use '~/' for home directory, '@/' for app directory, "
        f"or provide an absolute path"
    )
