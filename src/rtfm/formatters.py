"""Text formatters for non-interactive output."""

from .models import CommandEntry, ParsedDocument


def format_command_names(entries: list[CommandEntry]) -> str:
    """One command name per line."""
    if not entries:
        return "No matching commands."
    return "\n".join(entry.name for entry in entries)


def format_search_results(entries: list[CommandEntry]) -> str:
    """Command names with sections and descriptions, aligned."""
    if not entries:
        return "No matching commands."

    labels = []
    for entry in entries:
        if entry.sections:
            sections = ",".join(str(s) for s in sorted(entry.sections))
            labels.append(f"{entry.name} ({sections})")
        else:
            labels.append(f"{entry.name} (tldr)")
    width = max(len(label) for label in labels)

    lines = []
    for label, entry in zip(labels, entries):
        if entry.description:
            lines.append(f"{label.ljust(width)} - {entry.description}")
        else:
            lines.append(label)
    return "\n".join(lines)


def format_document(document: ParsedDocument) -> str:
    """Plain visible text of a parsed document."""
    return "\n".join(line.text for line in document.lines)


def format_help(prog: str) -> str:
    return "\n".join(
        [
            f"Usage: {prog} [options] [command]",
            "",
            "Commands:",
            f"  {prog}                            Interactive browser (default)",
            f"  {prog} search <query>             Commands starting with <query>, with descriptions",
            f"  {prog} getman <command> [--section N]",
            "                                  Print a man page",
            f"  {prog} getmans <prefix>           List command names starting with <prefix>",
            f"  {prog} help                       Show this help",
            f"  {prog} version                    Show version",
            "",
            "Options:",
            "  -m, --manpage N                 Default man section (1-9)",
            "  -l, --log PATH                  Write a structured log file",
            "  --config PATH                   Config file (default: ~/.rtfm/config.json)",
            "",
            "Keys:",
            "  Tab switch pane | arrows/PgUp/PgDn/Home/End navigate | Enter open",
            "  / search | n/N next/previous match | t man/tldr | Esc back | q quit",
        ]
    )
