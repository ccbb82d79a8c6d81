"""Export service: Markdown/JSON/HTML renderings of a sanitized session."""

from __future__ import annotations

import json
from typing import assert_never

from result import Err, Ok, Result

from ccshare.models.messages import TextBlock, ThinkingBlock, ToolResultBlock, ToolUseBlock
from ccshare.models.sessions import ParsedSession
from ccshare.render.diff import compute_diff, diff_stats, format_diff
from ccshare.render.display import display_text, has_visible_content, result_text
from ccshare.render.html import render_session_html
from ccshare.render.theme import format_date, format_tokens
from ccshare.render.tools import (
    AnsweredQuestion,
    ask_user_question,
    edit_pair,
    index_tool_results,
    tool_summary,
)

EXPORT_FORMATS = ("markdown", "json", "html")


class ExportService:
    """Service for exporting sessions."""

    def export(self, session: ParsedSession, fmt: str) -> Result[str, str]:
        """Export in one of EXPORT_FORMATS."""
        match fmt.strip().lower():
            case "markdown" | "md":
                return self.export_session_markdown(session)
            case "json":
                return self.export_session_json(session)
            case "html":
                return self.export_session_html(session)
            case _:
                return Err(f"Unsupported export format: {fmt}")

    def export_session_markdown(self, session: ParsedSession) -> Result[str, str]:
        """Export a session as Markdown."""
        meta = session.metadata
        results, tool_use_ids = index_tool_results(session.messages)

        lines: list[str] = []
        lines.append(f"# {meta.title}")
        lines.append("")
        lines.append(f"**Project:** {meta.project_name}")
        if meta.branch:
            lines.append(f"**Branch:** {meta.branch}")
        if meta.model:
            lines.append(f"**Model:** {meta.model}")
        lines.append(f"**Date:** {format_date(meta.session_date)}")
        lines.append(f"**Messages:** {meta.message_count}")
        if meta.total_input_tokens or meta.total_output_tokens:
            lines.append(
                f"**Tokens:** {format_tokens(meta.total_input_tokens)} in / "
                f"{format_tokens(meta.total_output_tokens)} out"
            )
        lines.append("")
        lines.append("---")
        lines.append("")

        for msg in session.messages:
            if not has_visible_content(msg, tool_use_ids):
                continue
            is_user = msg.type == "user"
            heading = "## User" if is_user else f"## Assistant ({msg.model or 'unknown'})"
            section: list[str] = []
            for block in msg.content:
                match block:
                    case TextBlock():
                        text = display_text(block, is_user=is_user)
                        if text:
                            section.extend([text, ""])
                    case ThinkingBlock():
                        section.extend(["<details><summary>Thinking</summary>", ""])
                        section.extend([block.thinking, "", "</details>", ""])
                    case ToolUseBlock():
                        section.extend(_tool_call_markdown(block, results.get(block.id)))
                    case ToolResultBlock():
                        if block.tool_use_id not in tool_use_ids:
                            label = "Error Result" if block.is_error else "Tool Result"
                            section.extend([f"### {label}", "", _fence(result_text(block)), ""])
                    case _:
                        assert_never(block)
            if section:
                lines.extend([heading, "", *section])

        return Ok("\n".join(lines))

    def export_session_json(self, session: ParsedSession) -> Result[str, str]:
        """Export a session as the JSON share payload."""
        payload = session.model_dump(mode="json", by_alias=True, exclude_none=True)
        return Ok(json.dumps(payload, indent=2, ensure_ascii=False))

    def export_session_html(self, session: ParsedSession) -> Result[str, str]:
        """Export a session as a standalone HTML document."""
        return Ok(render_session_html(session))


def _tool_call_markdown(block: ToolUseBlock, result: ToolResultBlock | None) -> list[str]:
    summary = tool_summary(block.name, block.input)
    out = [f"### Tool: {block.name}" + (f" `{summary}`" if summary else ""), ""]

    questions = ask_user_question(block, result)
    pair = edit_pair(block)
    if questions:
        for question in questions:
            out.extend(_question_markdown(question))
    elif pair is not None:
        _, before, after = pair
        diff_lines = compute_diff(before, after)
        stats = diff_stats(diff_lines)
        out.extend(
            [f"+{stats.added} -{stats.removed}", "", _fence(format_diff(diff_lines), "diff")]
        )
    else:
        out.append(_fence(json.dumps(block.input, indent=2, ensure_ascii=False), "json"))
    out.append("")

    quiet = block.name.lower() in {"edit", "write"} or bool(questions)
    if result is not None and (result.is_error or not quiet):
        out.extend(["**Error:**" if result.is_error else "**Result:**", ""])
        out.extend([_fence(result_text(result)), ""])
    return out


def _question_markdown(question: AnsweredQuestion) -> list[str]:
    heading = f"#### Question: {question.header}" if question.header else "#### Question"
    if question.multi_select:
        heading += " (multiple choice)"
    out = [heading, "", question.question, ""]
    for option in question.options:
        label = f"**{option.label}**" if option.selected else option.label
        line = f"- [{'x' if option.selected else ' '}] {label}"
        out.append(f"{line}: {option.description}" if option.description else line)
    if question.other_answer:
        out.append(f"- [x] Other: {question.other_answer}")
    out.append("")
    return out


def _fence(text: str, language: str = "") -> str:
    fence = "```"
    while fence in text:
        fence += "`"
    return f"{fence}{language}\n{text}\n{fence}"
