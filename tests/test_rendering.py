"""Tests for the template filters."""

from datetime import datetime, timezone

from studypal.rendering import format_duration, markdown_to_html, to_display_tz


class TestMarkdown:
    def test_empty(self):
        assert markdown_to_html('') == ''
        assert markdown_to_html(None) == ''

    def test_headings_shift_down(self):
        html = markdown_to_html('# Plan\n## Week 1')
        assert '<h3>Plan</h3>' in html
        assert '<h4>Week 1</h4>' in html

    def test_lists(self):
        html = markdown_to_html('* one\n* two\n\n1. first\n2. second')
        assert '<ul><li>one</li><li>two</li></ul>' in html
        assert '<ol><li>first</li><li>second</li></ol>' in html

    def test_inline_formatting(self):
        html = markdown_to_html('A **bold** and *soft* `x = 1`')
        assert html == '<p>A <strong>bold</strong> and <em>soft</em> <code>x = 1</code></p>'

    def test_paragraphs_and_line_breaks(self):
        html = markdown_to_html('line one\nline two\n\nnext')
        assert html == '<p>line one<br>line two</p>\n<p>next</p>'

    def test_html_is_escaped(self):
        html = markdown_to_html('<script>alert(1)</script>')
        assert '<script>' not in html
        assert '&lt;script&gt;' in html

    def test_code_block_kept_verbatim(self):
        html = markdown_to_html('```python\nif a < b:\n    **x**\n```')
        assert html == (
            '<pre><code class="language-python">if a &lt; b:\n    **x**</code></pre>'
        )

    def test_unclosed_fence(self):
        html = markdown_to_html('```\nx = 1')
        assert html == '<pre><code class="plaintext">x = 1</code></pre>'


class TestFilters:
    def test_duration(self):
        assert format_duration(None) == '-'
        assert format_duration(65) == '1:05'
        assert format_duration(3725) == '1:02:05'

    def test_display_tz_from_iso(self):
        dt = to_display_tz('2024-05-15T12:00:00.000Z', offset_hours=8)
        assert (dt.hour, dt.utcoffset().total_seconds()) == (20, 8 * 3600)

    def test_display_tz_naive_is_utc(self):
        dt = to_display_tz(datetime(2024, 5, 15, 23, 30), offset_hours=2)
        assert dt.day == 16
        assert dt.astimezone(timezone.utc).hour == 23

    def test_datefmt_filter(self, app):
        fmt = app.jinja_env.filters['datefmt']
        assert fmt(None) == '-'
        assert fmt('not a date') == '-'
        assert fmt('2024-05-15T12:00:00Z', '%Y-%m-%d') == '2024-05-15'
