"""Tests for document parsing and highlighting."""

from rtfm.models import SourceKind, Span, StyleTag
from rtfm.parser import DocumentParser, decode_terminal_text
from test_helpers import LS_MAN, LS_TLDR


def _styles(line):
    return [(span.text, span.style) for span in line.spans]


def _styled(line, style):
    return [span.text for span in line.spans if span.style is style]


class TestDecodeTerminalText:
    """Test overstrike and ANSI decoding."""

    def test_overstrike_bold(self):
        text, styles = decode_terminal_text("N\bNA\bAM\bME\bE")
        assert text == "NAME"
        assert styles == [StyleTag.BOLD] * 4

    def test_overstrike_underline_becomes_italic(self):
        text, styles = decode_terminal_text("_\bf_\bi_\bl_\be")
        assert text == "file"
        assert styles == [StyleTag.ITALIC] * 4

    def test_bold_underscore(self):
        text, styles = decode_terminal_text("_\b_")
        assert text == "_"
        assert styles == [StyleTag.BOLD]

    def test_sgr_bold_and_reset(self):
        text, styles = decode_terminal_text("\x1b[1mls\x1b[0m -l")
        assert text == "ls -l"
        assert styles[:2] == [StyleTag.BOLD, StyleTag.BOLD]
        assert set(styles[2:]) == {StyleTag.PLAIN}

    def test_sgr_underline_and_colors_are_stripped(self):
        text, styles = decode_terminal_text("\x1b[4;32mpath\x1b[24;39m!")
        assert text == "path!"
        assert styles == [StyleTag.ITALIC] * 4 + [StyleTag.PLAIN]

    def test_stray_backspace_is_dropped(self):
        text, _ = decode_terminal_text("\bab")
        assert text == "ab"


class TestManParsing:
    """Test man page structure."""

    def setup_method(self):
        self.parser = DocumentParser()
        self.doc = self.parser.parse(LS_MAN, SourceKind.MAN)
        self.lines = {line.text.strip(): line for line in self.doc.lines}

    def test_line_count_ignores_trailing_newline(self):
        assert len(self.doc) == len(LS_MAN.rstrip("\n").split("\n"))
        assert not self.doc.raw

    def test_headings_claim_whole_line(self):
        for heading in ("NAME", "SYNOPSIS", "DESCRIPTION"):
            assert _styles(self.lines[heading]) == [(heading, StyleTag.HEADING)]

    def test_page_header_is_not_a_heading(self):
        header = self.doc.lines[0]
        assert all(span.style is not StyleTag.HEADING for span in header.spans)

    def test_flags_are_highlighted(self):
        line = self.lines["-a, --all"]
        assert _styled(line, StyleTag.FLAG) == ["-a", "--all"]

    def test_bracketed_placeholders(self):
        line = self.lines["ls [OPTION]... [FILE]..."]
        assert _styled(line, StyleTag.PLACEHOLDER) == ["[OPTION]", "[FILE]"]

    def test_flag_with_value_and_link(self):
        color = self.lines["--color[=WHEN]"]
        assert _styled(color, StyleTag.FLAG) == ["--color"]
        assert _styled(color, StyleTag.PLACEHOLDER) == ["[=WHEN]"]
        link_line = self.lines["colorize the output; see https://example.org/color"]
        assert _styled(link_line, StyleTag.LINK) == ["https://example.org/color"]

    def test_hyphenated_words_are_not_flags(self):
        line = self.parser.parse_line("       a well-known non-option", SourceKind.MAN)
        assert _styled(line, StyleTag.FLAG) == []

    def test_text_is_preserved(self):
        assert [line.text for line in self.doc.lines] == LS_MAN.rstrip("\n").split("\n")

    def test_overstruck_heading(self):
        line = self.parser.parse_line("N\bNA\bAM\bME\bE", SourceKind.MAN)
        assert _styles(line) == [("NAME", StyleTag.HEADING)]

    def test_bold_text_inside_body(self):
        line = self.parser.parse_line("       l\bls\bs lists", SourceKind.MAN)
        assert line.spans[1] == Span("ls", StyleTag.BOLD)
        assert line.text == "       ls lists"


class TestTldrParsing:
    """Test tldr page structure."""

    def setup_method(self):
        self.doc = DocumentParser().parse(LS_TLDR, SourceKind.TLDR)
        self.lines = [line for line in self.doc.lines if line.text]

    def test_title(self):
        assert _styles(self.lines[0]) == [("# ls", StyleTag.HEADING)]

    def test_description_lines_are_quotes(self):
        assert self.lines[1].spans[0].style is StyleTag.QUOTE
        link = _styled(self.lines[2], StyleTag.LINK)
        assert link == ["https://www.gnu.org/software/coreutils/ls"]

    def test_example_description_is_plain(self):
        assert _styles(self.lines[3]) == [("- List files one per line:", StyleTag.PLAIN)]

    def test_example_command_is_code_with_placeholders(self):
        command = self.lines[6]
        assert command.text == "`ls -a {{path/to/directory}}`"
        assert _styled(command, StyleTag.PLACEHOLDER) == ["{{path/to/directory}}"]
        assert _styled(command, StyleTag.FLAG) == ["-a"]
        assert command.spans[0].style is StyleTag.CODE

    def test_indented_command_is_code(self):
        parser = DocumentParser()
        line = parser.parse_line("    tar cf target.tar file", SourceKind.TLDR)
        assert _styles(line) == [("    tar cf target.tar file", StyleTag.CODE)]


class TestParserContract:
    """Test determinism and fallback behavior."""

    def test_parsing_is_deterministic(self):
        parser = DocumentParser()
        assert parser.parse(LS_MAN) == parser.parse(LS_MAN)
        assert DocumentParser().parse(LS_TLDR, SourceKind.TLDR) == parser.parse(
            LS_TLDR, SourceKind.TLDR
        )

    def test_binary_input_is_raw(self):
        doc = DocumentParser().parse("\x00\x01junk\nok")
        assert doc.raw
        assert [line.text for line in doc.lines] == ["\x00\x01junk", "ok"]
        assert all(span.style is StyleTag.PLAIN for line in doc.lines for span in line.spans)

    def test_empty_input(self):
        doc = DocumentParser().parse("")
        assert len(doc) == 0
        assert not doc.raw

    def test_blank_lines_have_no_spans(self):
        doc = DocumentParser().parse("A\n\nB\n")
        assert doc.lines[1].spans == ()

    def test_tabs_are_expanded(self):
        line = DocumentParser().parse_line("\tindented", SourceKind.MAN)
        assert line.text == "        indented"

    def test_unrecognized_text_is_plain(self):
        line = DocumentParser().parse_line("  just words here", SourceKind.MAN)
        assert _styles(line) == [("  just words here", StyleTag.PLAIN)]
