"""Rich text as style runs over plain text.

Formatting is applied to character ranges of a ``RichText`` value and never
to a live editing surface, so every command can be exercised without one.
The persisted form is a small, canonical HTML fragment.
"""

import html
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from html.parser import HTMLParser
from typing import List, Optional, Tuple

FONT_SIZE_OPTIONS = [12, 14, 16, 18, 20, 24, 28, 32, 36, 40, 48, 56, 64, 72]
DEFAULT_LINE_HEIGHT = 1.5
DEFAULT_LETTER_SPACING = 0.0


class FormatCommand(Enum):
    """The fixed toolbar command set."""
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    ALIGN_LEFT = "align_left"
    ALIGN_CENTER = "align_center"
    ALIGN_RIGHT = "align_right"
    TEXT_COLOR = "text_color"
    FONT_SIZE = "font_size"
    LINE_HEIGHT = "line_height"
    LETTER_SPACING = "letter_spacing"
    RESET_SPACING = "reset_spacing"

    @property
    def needs_value(self) -> bool:
        return self in (
            FormatCommand.TEXT_COLOR,
            FormatCommand.FONT_SIZE,
            FormatCommand.LINE_HEIGHT,
            FormatCommand.LETTER_SPACING,
        )

    @property
    def is_range_command(self) -> bool:
        """Applies to the selected characters rather than the whole element."""
        return self in (
            FormatCommand.BOLD,
            FormatCommand.ITALIC,
            FormatCommand.UNDERLINE,
            FormatCommand.TEXT_COLOR,
            FormatCommand.FONT_SIZE,
        )


_TOGGLES = {
    FormatCommand.BOLD: "bold",
    FormatCommand.ITALIC: "italic",
    FormatCommand.UNDERLINE: "underline",
}

_ALIGNMENTS = {
    FormatCommand.ALIGN_LEFT: "left",
    FormatCommand.ALIGN_CENTER: "center",
    FormatCommand.ALIGN_RIGHT: "right",
}


@dataclass(frozen=True)
class CharStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: Optional[str] = None
    font_size: Optional[int] = None


PLAIN = CharStyle()


@dataclass(frozen=True)
class Segment:
    text: str
    style: CharStyle = PLAIN


def _normalize(segments) -> List[Segment]:
    """Drop empty runs and merge neighbours with the same style."""
    merged: List[Segment] = []
    for seg in segments:
        if not seg.text:
            continue
        if merged and merged[-1].style == seg.style:
            merged[-1] = Segment(merged[-1].text + seg.text, seg.style)
        else:
            merged.append(seg)
    return merged


@dataclass(frozen=True)
class RichText:
    """Immutable formatted text for one element."""
    segments: Tuple[Segment, ...] = ()
    align: Optional[str] = None
    line_height: Optional[float] = None
    letter_spacing: Optional[float] = None

    @classmethod
    def from_plain(cls, text: str) -> "RichText":
        return cls(tuple(_normalize([Segment(text)])))

    @property
    def plain_text(self) -> str:
        return "".join(seg.text for seg in self.segments)

    def __len__(self) -> int:
        return sum(len(seg.text) for seg in self.segments)

    def _split(self, start: int, end: int) -> Tuple[List[Segment], List[Segment], List[Segment]]:
        """Segments before, inside and after [start, end)."""
        before, inside, after = [], [], []
        pos = 0
        for seg in self.segments:
            seg_start, seg_end = pos, pos + len(seg.text)
            pos = seg_end
            cut_a = min(max(start - seg_start, 0), len(seg.text))
            cut_b = min(max(end - seg_start, 0), len(seg.text))
            before.append(Segment(seg.text[:cut_a], seg.style))
            inside.append(Segment(seg.text[cut_a:cut_b], seg.style))
            after.append(Segment(seg.text[cut_b:], seg.style))
        return before, inside, after

    def _clamp(self, start: int, end: int) -> Tuple[int, int]:
        length = len(self)
        start, end = sorted((start, end))
        return max(0, min(start, length)), max(0, min(end, length))

    def style_at(self, pos: int) -> CharStyle:
        """Style a character typed at ``pos`` inherits."""
        offset = 0
        for seg in self.segments:
            offset += len(seg.text)
            if pos <= offset and seg.text:
                return seg.style
        return self.segments[-1].style if self.segments else PLAIN

    def is_uniform(self, start: int, end: int, attr: str) -> bool:
        """True when every character in the range has ``attr`` set."""
        start, end = self._clamp(start, end)
        _, inside, _ = self._split(start, end)
        runs = [seg for seg in inside if seg.text]
        return bool(runs) and all(getattr(seg.style, attr) for seg in runs)

    def insert_text(self, pos: int, text: str) -> "RichText":
        pos, _ = self._clamp(pos, pos)
        style = self.style_at(pos)
        before, _, after = self._split(pos, pos)
        return replace(self, segments=tuple(_normalize(before + [Segment(text, style)] + after)))

    def delete_range(self, start: int, end: int) -> "RichText":
        start, end = self._clamp(start, end)
        before, _, after = self._split(start, end)
        return replace(self, segments=tuple(_normalize(before + after)))

    def restyle(self, start: int, end: int, **changes) -> "RichText":
        start, end = self._clamp(start, end)
        before, inside, after = self._split(start, end)
        inside = [Segment(seg.text, replace(seg.style, **changes)) for seg in inside]
        return replace(self, segments=tuple(_normalize(before + inside + after)))

    def apply(self, command: FormatCommand, start: int = 0, end: Optional[int] = None,
              value=None) -> "RichText":
        """Apply a toolbar command to a character range or the whole element."""
        if end is None:
            end = len(self)
        if command.needs_value and value is None:
            raise ValueError(f"{command.value} requires a value")

        if command in _TOGGLES:
            attr = _TOGGLES[command]
            return self.restyle(start, end, **{attr: not self.is_uniform(start, end, attr)})
        if command == FormatCommand.TEXT_COLOR:
            return self.restyle(start, end, color=str(value))
        if command == FormatCommand.FONT_SIZE:
            size = int(value)
            if size not in FONT_SIZE_OPTIONS:
                raise ValueError(f"Unsupported font size: {size}")
            return self.restyle(start, end, font_size=size)
        if command in _ALIGNMENTS:
            return replace(self, align=_ALIGNMENTS[command])
        if command == FormatCommand.LINE_HEIGHT:
            return replace(self, line_height=float(value))
        if command == FormatCommand.LETTER_SPACING:
            return replace(self, letter_spacing=float(value))
        if command == FormatCommand.RESET_SPACING:
            return replace(self, line_height=DEFAULT_LINE_HEIGHT, letter_spacing=DEFAULT_LETTER_SPACING)
        raise ValueError(f"Unknown format command: {command}")

    def to_html(self) -> str:
        """Canonical HTML for persistence and rendering."""
        body = "".join(_segment_html(seg) for seg in self.segments)
        block_styles = []
        if self.align:
            block_styles.append(f"text-align:{self.align}")
        if self.line_height is not None:
            block_styles.append(f"line-height:{_fmt_number(self.line_height)}")
        if self.letter_spacing is not None:
            block_styles.append(f"letter-spacing:{_fmt_number(self.letter_spacing)}px")
        if block_styles:
            return f'<div style="{";".join(block_styles)}">{body}</div>'
        return body

    @classmethod
    def from_html(cls, markup: Optional[str]) -> "RichText":
        parser = _RichTextParser()
        parser.feed(markup or "")
        parser.close()
        return cls(
            segments=tuple(_normalize(parser.segments)),
            align=parser.block.get("text-align"),
            line_height=_parse_number(parser.block.get("line-height")),
            letter_spacing=_parse_number(parser.block.get("letter-spacing")),
        )


def _fmt_number(value: float) -> str:
    return f"{value:g}"


def _parse_number(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    match = re.match(r"\s*(-?\d+(?:\.\d+)?)", raw)
    return float(match.group(1)) if match else None


def _segment_html(seg: Segment) -> str:
    out = html.escape(seg.text, quote=False).replace("\n", "<br>")
    style = seg.style
    css = []
    if style.color:
        css.append(f"color:{style.color}")
    if style.font_size:
        css.append(f"font-size:{style.font_size}px")
    if css:
        out = f'<span style="{";".join(css)}">{out}</span>'
    if style.underline:
        out = f"<u>{out}</u>"
    if style.italic:
        out = f"<i>{out}</i>"
    if style.bold:
        out = f"<b>{out}</b>"
    return out


def _parse_style(raw: Optional[str]) -> dict:
    declarations = {}
    for part in (raw or "").split(";"):
        name, sep, value = part.partition(":")
        if sep:
            declarations[name.strip().lower()] = value.strip()
    return declarations


class _RichTextParser(HTMLParser):
    """Reads the HTML produced by contenteditable surfaces and by ``to_html``."""

    BLOCK_TAGS = ("div", "p")

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.segments: List[Segment] = []
        self.block: dict = {}
        self._stack: List[Tuple[str, CharStyle]] = []
        self._seen_block = False

    @property
    def _style(self) -> CharStyle:
        return self._stack[-1][1] if self._stack else PLAIN

    def _text_so_far(self) -> str:
        return "".join(seg.text for seg in self.segments)

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        css = _parse_style(attrs.get("style"))
        style = self._style

        if tag == "br":
            self.segments.append(Segment("\n", style))
            return
        if tag in self.BLOCK_TAGS:
            if not self._seen_block:
                self._seen_block = True
                for prop in ("text-align", "line-height", "letter-spacing"):
                    if prop in css:
                        self.block[prop] = css[prop]
            else:
                text = self._text_so_far()
                if text and not text.endswith("\n"):
                    self.segments.append(Segment("\n", style))
        if tag in ("b", "strong") or css.get("font-weight") in ("bold", "700"):
            style = replace(style, bold=True)
        if tag in ("i", "em") or css.get("font-style") == "italic":
            style = replace(style, italic=True)
        if tag == "u" or "underline" in css.get("text-decoration", ""):
            style = replace(style, underline=True)
        color = css.get("color") or (attrs.get("color") if tag == "font" else None)
        if color:
            style = replace(style, color=color)
        size = _parse_number(css.get("font-size"))
        if size:
            style = replace(style, font_size=int(size))
        self._stack.append((tag, style))

    def handle_endtag(self, tag):
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index][0] == tag:
                del self._stack[index:]
                return

    def handle_data(self, data):
        self.segments.append(Segment(data, self._style))
