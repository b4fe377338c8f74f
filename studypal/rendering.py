"""Template filters for study content.

The flows return a small Markdown subset (headings, bullet and numbered
lists, emphasis, inline code and fenced code blocks). ``markdown_to_html``
renders exactly that subset, escaping any HTML in the source first.
"""
import re
from datetime import timedelta, timezone

from markupsafe import Markup, escape

_HEADING = re.compile(r'^(#{1,4}) (.+)$')
_BULLET = re.compile(r'^\s*[-*] (.+)$')
_NUMBERED = re.compile(r'^\s*\d+[.)] (.+)$')
_RULE = re.compile(r'^-{3,}\s*$')
_FENCE = re.compile(r'^```(\w*)\s*$')

_INLINE = [
    (re.compile(r'`([^`\n]+)`'), r'<code>\1</code>'),
    (re.compile(r'\*\*(.+?)\*\*'), r'<strong>\1</strong>'),
    (re.compile(r'(?<![*\w])\*(?!\s)(.+?)(?<!\s)\*(?![*\w])'), r'<em>\1</em>'),
]


def _code_block(lang, lines):
    css = f'language-{lang}' if lang else 'plaintext'
    body = escape('\n'.join(lines))
    return f'<pre><code class="{css}">{body}</code></pre>'


def _inline(text):
    html = str(escape(text))
    for pattern, repl in _INLINE:
        html = pattern.sub(repl, html)
    return html


def markdown_to_html(text):
    """Render study-flow Markdown as HTML. Empty input renders as ''."""
    if not text:
        return Markup('')

    lines = str(text).replace('\r\n', '\n').replace('\r', '\n').split('\n')
    blocks = []
    paragraph = []
    list_tag = None
    list_items = []
    code_lang = None
    code_lines = []

    def flush_paragraph():
        if paragraph:
            blocks.append('<p>' + '<br>'.join(_inline(l) for l in paragraph) + '</p>')
            paragraph.clear()

    def flush_list():
        nonlocal list_tag
        if list_tag:
            items = ''.join(f'<li>{_inline(i)}</li>' for i in list_items)
            blocks.append(f'<{list_tag}>{items}</{list_tag}>')
            list_items.clear()
            list_tag = None

    for line in lines:
        if code_lang is not None:
            if line.strip() == '```':
                blocks.append(_code_block(code_lang, code_lines))
                code_lang = None
                code_lines = []
            else:
                code_lines.append(line)
            continue

        fence = _FENCE.match(line)
        if fence:
            flush_paragraph()
            flush_list()
            code_lang = fence.group(1)
            continue

        if not line.strip():
            flush_paragraph()
            flush_list()
            continue

        heading = _HEADING.match(line)
        if heading:
            flush_paragraph()
            flush_list()
            # '#' maps to h3 so content headings sit below the page title
            level = len(heading.group(1)) + 2
            blocks.append(f'<h{level}>{_inline(heading.group(2))}</h{level}>')
            continue

        if _RULE.match(line):
            flush_paragraph()
            flush_list()
            blocks.append('<hr>')
            continue

        for tag, pattern in (('ul', _BULLET), ('ol', _NUMBERED)):
            item = pattern.match(line)
            if item:
                flush_paragraph()
                if list_tag != tag:
                    flush_list()
                    list_tag = tag
                list_items.append(item.group(1))
                break
        else:
            flush_list()
            paragraph.append(line.strip())

    if code_lang is not None:
        # Unclosed fence: keep what we have as code
        blocks.append(_code_block(code_lang, code_lines))
    flush_paragraph()
    flush_list()
    return Markup('\n'.join(blocks))


def format_duration(seconds):
    """Seconds as M:SS, or H:MM:SS past an hour."""
    if seconds is None:
        return '-'
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f'{hours}:{minutes:02d}:{secs:02d}'
    return f'{minutes}:{secs:02d}'


def to_display_tz(value, offset_hours=0):
    """Convert a datetime (naive = UTC) or ISO timestamp to the display offset."""
    if isinstance(value, str):
        from studypal.stores import parse_timestamp
        value = parse_timestamp(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone(timedelta(hours=offset_hours)))


def init_app(app):
    """Register the template filters on ``app``."""

    @app.template_filter('datefmt')
    def datefmt_filter(value, fmt='%Y-%m-%d %H:%M'):
        if not value:
            return '-'
        try:
            return to_display_tz(value, app.config.get('DISPLAY_TIMEZONE_OFFSET', 0)).strftime(fmt)
        except ValueError:
            return '-'

    app.add_template_filter(format_duration, 'duration')
    app.add_template_filter(markdown_to_html, 'md2html')
