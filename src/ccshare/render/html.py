"""HTML rendering of sanitized sessions: markdown, highlighted code, diffs."""

from __future__ import annotations

import json
import re
from html import escape, unescape
from typing import assert_never

import markdown
from markdown.treeprocessors import Treeprocessor
from markdown.util import AMP_SUBSTITUTE
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ccshare.models.diff import DiffLine, DiffLineType
from ccshare.models.messages import (
    ContentBlock,
    ParsedMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from ccshare.models.sessions import ParsedSession, SessionMetadata
from ccshare.render.diff import compute_diff, diff_stats
from ccshare.render.display import (
    display_text,
    has_user_text,
    has_visible_content,
    result_text,
)
from ccshare.render.theme import COLORS, FONT_FAMILY, MONO_FAMILY, format_date, format_tokens
from ccshare.render.tools import (
    AnsweredQuestion,
    ask_user_question,
    detect_language,
    edit_pair,
    index_tool_results,
    language_from_path,
    tool_file_path,
    tool_summary,
)

_SAFE_SCHEMES = frozenset({"http", "https", "mailto"})
_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_URL_NOISE = re.compile(r"[\x00-\x20]")


def is_safe_url(url: str) -> bool:
    """True when *url* is relative or uses an http, https or mailto scheme."""
    normalized = _URL_NOISE.sub("", unescape(url.replace(AMP_SUBSTITUTE, "&")))
    match = _SCHEME.match(normalized)
    return match is None or match.group(1).lower() in _SAFE_SCHEMES


class _SafeLinks(Treeprocessor):
    """Drop link targets with unsafe schemes and open the rest in a new tab."""

    def run(self, root):
        for element in root.iter():
            for attr in ("href", "src"):
                value = element.get(attr)
                if value is not None and not is_safe_url(value):
                    del element.attrib[attr]
            if element.tag == "a" and "href" in element.attrib:
                element.set("target", "_blank")
                element.set("rel", "noopener noreferrer")


_MD = markdown.Markdown(extensions=["fenced_code", "tables", "nl2br"])
# Raw HTML in message text is shown as text, never passed through.
_MD.preprocessors.deregister("html_block")
_MD.inlinePatterns.deregister("html")
# Runs after inline parsing and unescaping so it sees final attribute values.
_MD.treeprocessors.register(_SafeLinks(_MD), "safe_links", -10)

_FORMATTER = HtmlFormatter(style="monokai", noclasses=True, nowrap=False)

_DIFF_PREFIX = {DiffLineType.ADDED: "+", DiffLineType.REMOVED: "-", DiffLineType.CONTEXT: " "}


def render_markdown(text: str) -> str:
    """Convert markdown text to an HTML fragment."""
    _MD.reset()
    return _MD.convert(text)


def highlight_code(code: str, language: str | None = None) -> str:
    """Return HTML with syntax-highlighted code."""
    try:
        lexer = get_lexer_by_name(language or "text", stripnl=False)
    except ClassNotFound:
        lexer = get_lexer_by_name("text", stripnl=False)
    return f'<div style="{_CODE_STYLE}">{highlight(code, lexer, _FORMATTER)}</div>'


def build_diff_html(lines: list[DiffLine], file_path: str = "") -> str:
    """Build HTML for an inline diff with a ``+N -M`` header."""
    stats = diff_stats(lines)
    name = escape(_basename(file_path))
    header_parts = [f'<span style="color: {COLORS["text_secondary"]}">{name}</span>']
    if stats.added:
        header_parts.append(f'<span style="color: {COLORS["added"]}">+{stats.added}</span>')
    if stats.removed:
        header_parts.append(f'<span style="color: {COLORS["removed"]}">-{stats.removed}</span>')

    rows = [
        f'<div style="{_DIFF_STYLES[line.type]}">'
        f"{_DIFF_PREFIX[line.type]} {escape(line.text) or ' '}</div>"
        for line in lines
    ]
    if not rows:
        rows.append(f'<div style="{_DIFF_STYLES[DiffLineType.CONTEXT]}">(no changes)</div>')

    return (
        f'<div style="{_DIFF_CONTAINER_STYLE}">'
        f'<div style="{_DIFF_HEADER_STYLE}">{" ".join(header_parts)}</div>'
        + "\n".join(rows)
        + "</div>"
    )


def render_session_html(session: ParsedSession) -> str:
    """Render a full standalone HTML document for a session."""
    results, tool_use_ids = index_tool_results(session.messages)
    body = [_render_header(session.metadata)]
    for message in session.messages:
        rendered = render_message_html(message, results, tool_use_ids)
        if rendered:
            body.append(rendered)
    return _wrap_document(session.metadata.title, "\n".join(body))


def render_message_html(
    message: ParsedMessage,
    results: dict[str, ToolResultBlock],
    tool_use_ids: set[str],
) -> str:
    """Render one message, or an empty string if nothing in it is visible."""
    if not has_visible_content(message, tool_use_ids):
        return ""

    is_user = message.type == "user"
    blocks = "\n".join(
        part
        for part in (_render_block(b, is_user, results, tool_use_ids) for b in message.content)
        if part
    )

    # Tool-result-only user turns are shown without the user card.
    if is_user and not has_user_text(message):
        return f'<div class="turn">{blocks}</div>'

    label = "User" if is_user else "Assistant"
    color = COLORS["user"] if is_user else COLORS["accent"]
    model = (
        f' <span style="{_BADGE_STYLE}">{escape(message.model)}</span>'
        if message.model and not is_user
        else ""
    )
    border = color if is_user else "transparent"
    return (
        f'<div class="message" style="border-left: 3px solid {border}; {_MESSAGE_STYLE}">'
        f'<div style="color: {color}; {_LABEL_STYLE}">{label}{model}</div>'
        f"{blocks}</div>"
    )


def _render_block(
    block: ContentBlock,
    is_user: bool,
    results: dict[str, ToolResultBlock],
    tool_use_ids: set[str],
) -> str:
    match block:
        case TextBlock():
            text = display_text(block, is_user=is_user)
            return render_markdown(text) if text else ""
        case ThinkingBlock():
            return (
                f'<details style="{_THINKING_STYLE}"><summary>Thinking '
                f'<span style="color: {COLORS["text_muted"]}">'
                f"{len(block.thinking):,} chars</span></summary>"
                f'<div style="white-space: pre-wrap">{escape(block.thinking)}</div></details>'
            )
        case ToolUseBlock():
            return _render_tool_call(block, results.get(block.id))
        case ToolResultBlock():
            if block.tool_use_id in tool_use_ids:
                return ""
            return _render_result(block, None, standalone=True)
        case _:
            assert_never(block)


def _render_tool_call(block: ToolUseBlock, result: ToolResultBlock | None) -> str:
    name = block.name.lower()
    summary = tool_summary(block.name, block.input)
    header = f'<span style="{_BADGE_STYLE}; color: {COLORS["tool"]}">{escape(block.name)}</span>'
    if summary:
        header += f' <span style="font-family: {MONO_FAMILY}">{escape(summary)}</span>'
    if result is not None and result.is_error:
        header += f' <span style="color: {COLORS["error"]}">error</span>'

    questions = ask_user_question(block, result)
    pair = edit_pair(block)
    if questions:
        body = "".join(_render_question(question) for question in questions)
    elif pair is not None:
        file_path, before, after = pair
        body = build_diff_html(compute_diff(before, after), file_path)
    elif name == "write" and isinstance(block.input.get("content"), str):
        file_path = tool_file_path(block.input)
        body = highlight_code(str(block.input["content"]), language_from_path(file_path))
    else:
        body = highlight_code(json.dumps(block.input, indent=2, ensure_ascii=False), "json")

    # Edit/Write results only say the file was updated. Answers are shown on the options.
    quiet = name in {"edit", "write"} or bool(questions)
    show_result = result is not None and (result.is_error or not quiet)
    if show_result and result is not None:
        body += _render_result(result, detect_language(block.name, block.input))

    is_open = " open" if quiet else ""
    return (
        f'<details{is_open} style="{_TOOL_STYLE}"><summary>{header}</summary>{body}</details>'
    )


def _render_question(question: AnsweredQuestion) -> str:
    header = escape(question.header)
    parts = [f'<span style="{_CHIP_STYLE}; color: {COLORS["accent"]}">{header}</span>']
    if question.multi_select:
        parts.append(f' <span style="color: {COLORS["text_muted"]}">multiple choice</span>')
    parts.append(f'<p style="margin: 8px 0">{escape(question.question)}</p>')
    for option in question.options:
        parts.append(_render_option(option.label, option.description, option.selected))
    if question.other_answer:
        parts.append(_render_option("Other", question.other_answer, True))
    return f'<div class="question" style="{_QUESTION_STYLE}">{"".join(parts)}</div>'


def _render_option(label: str, description: str, selected: bool) -> str:
    marker = "✓" if selected else "○"
    color = COLORS["accent"] if selected else COLORS["text"]
    border = COLORS["accent"] if selected else COLORS["border"]
    note = (
        f'<div style="color: {COLORS["text_muted"]}; font-size: 12px">{escape(description)}</div>'
        if description
        else ""
    )
    state = "selected" if selected else "option"
    return (
        f'<div class="{state}" style="border: 1px solid {border}; {_OPTION_STYLE}">'
        f'<span style="color: {color}">{marker} {escape(label)}</span>{note}</div>'
    )


def _render_result(
    block: ToolResultBlock, language: str | None, *, standalone: bool = False
) -> str:
    content = result_text(block)
    if block.is_error:
        title = "Error Result" if standalone else "Error"
        return (
            f'<div style="color: {COLORS["error"]}; {_LABEL_STYLE}">{title}</div>'
            f'<pre style="{_PRE_STYLE}; color: {COLORS["error"]}">{escape(content)}</pre>'
        )
    title = "Tool Result" if standalone else "Result"
    rendered = (
        highlight_code(content, language)
        if language
        else f'<pre style="{_PRE_STYLE}">{escape(content)}</pre>'
    )
    return f'<div style="color: {COLORS["text_muted"]}; {_LABEL_STYLE}">{title}</div>{rendered}'


def _render_header(metadata: SessionMetadata) -> str:
    chips = [metadata.project_name]
    if metadata.branch:
        chips.append(metadata.branch)
    if metadata.model:
        chips.append(metadata.model)
    chips.append(format_date(metadata.session_date))
    chips.append(f"{metadata.message_count} messages")
    if metadata.total_input_tokens > 0 or metadata.total_output_tokens > 0:
        chips.append(
            f"{format_tokens(metadata.total_input_tokens)} in · "
            f"{format_tokens(metadata.total_output_tokens)} out"
        )
    chip_html = "".join(f'<span style="{_CHIP_STYLE}">{escape(chip)}</span>' for chip in chips)
    return f"<header><h1>{escape(metadata.title)}</h1><div>{chip_html}</div></header>"


def _basename(file_path: str) -> str:
    return file_path.replace("\\", "/").rsplit("/", 1)[-1]


def _wrap_document(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>{escape(title)}</title><style>
body {{
    font-family: {FONT_FAMILY};
    font-size: 14px;
    color: {COLORS["text"]};
    background-color: {COLORS["bg"]};
    line-height: 1.6;
    max-width: 960px;
    margin: 0 auto;
    padding: 32px 16px;
}}
h1 {{ font-weight: 400; font-size: 32px; margin: 0 0 16px 0; }}
code {{
    font-family: {MONO_FAMILY};
    font-size: 12px;
    background-color: {COLORS["elevated"]};
    padding: 1px 4px;
    border-radius: 3px;
}}
pre code {{ background-color: transparent; padding: 0; }}
a {{ color: {COLORS["accent"]}; }}
summary {{ cursor: pointer; }}
.message, .turn {{ margin: 16px 0; }}
</style></head><body>{body}</body></html>"""


# ── Inline styles ──

_CODE_STYLE = (
    f"font-family: {MONO_FAMILY}; font-size: 12px; line-height: 1.4; "
    f"border-radius: 6px; overflow-x: auto; margin: 8px 0"
)
_PRE_STYLE = (
    f"font-family: {MONO_FAMILY}; font-size: 12px; white-space: pre-wrap; "
    f"background-color: {COLORS['surface']}; border: 1px solid {COLORS['border']}; "
    f"border-radius: 6px; padding: 10px; overflow-x: auto"
)
_MESSAGE_STYLE = "border-radius: 12px; padding: 16px 24px"
_LABEL_STYLE = "font-size: 12px; font-weight: 600; text-transform: uppercase; margin: 4px 0"
_BADGE_STYLE = (
    f"font-family: {MONO_FAMILY}; font-size: 12px; padding: 1px 8px; border-radius: 4px; "
    f"background-color: {COLORS['elevated']}; color: {COLORS['text_muted']}"
)
_CHIP_STYLE = (
    f"display: inline-block; margin: 0 8px 8px 0; padding: 4px 14px; border-radius: 999px; "
    f"background-color: {COLORS['elevated']}; border: 1px solid {COLORS['border']}"
)
_THINKING_STYLE = (
    f"color: {COLORS['accent']}; border: 1px solid {COLORS['border']}; "
    f"border-radius: 8px; padding: 8px 16px; margin: 8px 0"
)
_TOOL_STYLE = (
    f"border: 1px solid {COLORS['border']}; border-radius: 8px; "
    f"padding: 8px 16px; margin: 8px 0"
)
_QUESTION_STYLE = (
    f"background-color: {COLORS['surface']}; border: 1px solid {COLORS['border']}; "
    f"border-radius: 12px; padding: 12px 16px; margin: 8px 0"
)
_OPTION_STYLE = "border-radius: 8px; padding: 8px 12px; margin: 6px 0"
_DIFF_CONTAINER_STYLE = (
    f"font-family: {MONO_FAMILY}; font-size: 12px; line-height: 1.5; border-radius: 6px; "
    f"overflow-x: auto; background-color: {COLORS['surface']}; padding: 0 0 8px 0; margin: 8px 0"
)
_DIFF_HEADER_STYLE = (
    f"padding: 6px 12px; border-bottom: 1px solid {COLORS['border']}; margin-bottom: 6px"
)
_DIFF_LINE_STYLE = "padding: 1px 12px; white-space: pre-wrap; word-break: break-all"
_DIFF_STYLES = {
    DiffLineType.ADDED: (
        f"{_DIFF_LINE_STYLE}; background-color: rgba(109,209,130,0.15); color: {COLORS['added']}"
    ),
    DiffLineType.REMOVED: (
        f"{_DIFF_LINE_STYLE}; background-color: rgba(209,109,109,0.15); color: {COLORS['removed']}"
    ),
    DiffLineType.CONTEXT: f"{_DIFF_LINE_STYLE}; color: {COLORS['text_muted']}",
}
