"""Tests for the rich text model and its HTML form."""

import pytest

from funnel_studio.editor.rich_text import FONT_SIZE_OPTIONS, FormatCommand, RichText


class TestFormatting:
    """Tests for toolbar commands on RichText."""

    def setup_method(self):
        """Set up test fixtures."""
        self.text = RichText.from_plain("Hello world")

    def test_bold_range(self):
        """Bold wraps only the selected characters."""
        assert self.text.apply(FormatCommand.BOLD, 0, 5).to_html() == "<b>Hello</b> world"

    def test_bold_toggles_off(self):
        """Applying bold to bold text removes it."""
        bolded = self.text.apply(FormatCommand.BOLD, 0, 5)
        assert bolded.apply(FormatCommand.BOLD, 0, 5).to_html() == "Hello world"

    def test_mixed_range_becomes_bold(self):
        """A partly bold range is made fully bold."""
        partly = self.text.apply(FormatCommand.BOLD, 0, 5)
        assert partly.apply(FormatCommand.BOLD, 0, 11).to_html() == "<b>Hello world</b>"

    def test_nested_styles(self):
        """Styles nest in a fixed order."""
        styled = (
            RichText.from_plain("x")
            .apply(FormatCommand.BOLD)
            .apply(FormatCommand.ITALIC)
            .apply(FormatCommand.TEXT_COLOR, value="#f00")
        )
        assert styled.to_html() == '<b><i><span style="color:#f00">x</span></i></b>'

    def test_font_size(self):
        """Font sizes come from the fixed list."""
        sized = self.text.apply(FormatCommand.FONT_SIZE, 6, 11, value=24)
        assert sized.to_html() == 'Hello <span style="font-size:24px">world</span>'

    def test_font_size_must_be_listed(self):
        """Sizes outside the list are refused."""
        assert 13 not in FONT_SIZE_OPTIONS
        with pytest.raises(ValueError):
            self.text.apply(FormatCommand.FONT_SIZE, 0, 5, value=13)

    def test_value_commands_need_value(self):
        """Color without a value is an error."""
        with pytest.raises(ValueError):
            self.text.apply(FormatCommand.TEXT_COLOR, 0, 5)

    def test_alignment_wraps_block(self):
        """Alignment applies to the whole element."""
        assert RichText.from_plain("Hi").apply(FormatCommand.ALIGN_CENTER).to_html() == \
            '<div style="text-align:center">Hi</div>'

    def test_reset_spacing(self):
        """Reset restores the default line height and letter spacing."""
        spaced = RichText.from_plain("Hi").apply(FormatCommand.LETTER_SPACING, value=3)
        reset = spaced.apply(FormatCommand.RESET_SPACING)
        assert reset.to_html() == '<div style="line-height:1.5;letter-spacing:0px">Hi</div>'


class TestEditing:
    """Tests for text edits."""

    def test_insert_inherits_style(self):
        """Typed text takes the style before the caret."""
        text = RichText.from_html("<b>ab</b>").insert_text(2, "c")
        assert text.to_html() == "<b>abc</b>"

    def test_delete_range(self):
        """Deleting merges the surrounding runs."""
        text = RichText.from_plain("Hello world").delete_range(5, 11)
        assert text.plain_text == "Hello"

    def test_escapes_markup(self):
        """Plain text is escaped in HTML."""
        assert RichText.from_plain("a < b").to_html() == "a &lt; b"

    def test_newlines(self):
        """Newlines are line breaks."""
        assert RichText.from_plain("a\nb").to_html() == "a<br>b"
        assert RichText.from_html("a<br>b").plain_text == "a\nb"


class TestFromHtml:
    """Tests for reading HTML."""

    def test_strong_reads_as_bold(self):
        """Browser markup variants normalize to the canonical tags."""
        assert RichText.from_html("<strong>x</strong> y").to_html() == "<b>x</b> y"

    def test_block_styles(self):
        """Block styles on the wrapper are read back."""
        text = RichText.from_html('<div style="text-align:right;line-height:2">Hi</div>')
        assert text.align == "right"
        assert text.line_height == 2.0
        assert text.plain_text == "Hi"

    def test_empty(self):
        """Empty input is empty text."""
        assert len(RichText.from_html(None)) == 0
        assert RichText.from_html("").to_html() == ""
