"""Preview generator — deterministic text preview of a configuration file.

The preview is rendered inside bordered, fixed-width terminal panels, so it is
sanitized of characters that would desync the border: pipes become a box
drawing bar and dash rules are normalized to one fixed width.
"""

import re

from ccdash.summary.models import Preview

DEFAULT_PREVIEW_LINES = 30

FRONT_MATTER_DELIMITER = "---"
PIPE_SUBSTITUTE = "\u2502"  # box drawing light vertical
RULE = "\u2500" * 40
END_OF_FILE_MARKER = "[end of file]"

_DASH_RUN = re.compile(r"-{3,}")


def _sanitize(text: str) -> str:
    text = text.replace("|", PIPE_SUBSTITUTE)
    return _DASH_RUN.sub(RULE, text)


def _split_lines(content: str) -> list[str]:
    """Split on newlines; a trailing newline does not start an extra line."""
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _strip_front_matter(lines: list[str]) -> list[str]:
    if not lines or lines[0] != FRONT_MATTER_DELIMITER:
        return lines
    for idx in range(1, len(lines)):
        if lines[idx] == FRONT_MATTER_DELIMITER:
            return lines[idx + 1 :]
    return lines


def generate_preview(content: str, max_lines: int = DEFAULT_PREVIEW_LINES) -> Preview:
    """Build a bounded, sanitized preview of *content*.

    Keeps the first max_lines lines, drops a leading front-matter block when
    both delimiters fall inside that slice, then appends a footer: a rule plus
    either the end-of-file marker or the number of omitted lines.

    Args:
        content: Raw file text
        max_lines: Number of leading lines to keep

    Returns:
        Preview with sanitized text and whether the whole file fit
    """
    all_lines = _split_lines(content)
    total_lines = len(all_lines)
    kept = _strip_front_matter(all_lines[:max_lines])

    body = "\n".join(kept).strip()
    is_complete = total_lines <= max_lines
    if is_complete:
        footer = f"{RULE}\n{END_OF_FILE_MARKER}"
    else:
        footer = f"{RULE}\n[{total_lines - max_lines} more lines]"

    text = f"{_sanitize(body)}\n{footer}" if body else footer
    return Preview(text=text, is_complete=is_complete)
