"""Prompt templates for configuration-file summaries."""

SYSTEM_PROMPT = (
    "You are a concise technical writer documenting configuration for an AI coding "
    "assistant. Be direct and technical. Never invent behavior that is not in the file."
)

SUMMARY_TEMPLATE = """\
Summarize this {item_type} for a developer browsing their configuration.

Use this structure, plain text, at most 120 words in total:
What it does: one or two sentences.
Key mechanics: up to three short bullet points (triggers, tools, inputs, outputs).
Practical notes: one sentence on when to use it or what to watch out for.

--- {item_type} file ---
{content}
"""


def build_prompt(content: str, item_type: str, max_chars: int) -> str:
    """Build the user prompt, truncating content to max_chars characters.

    Args:
        content: Raw file text
        item_type: Label such as "skill", "agent", "hook"
        max_chars: Character budget for the embedded file content

    Returns:
        Prompt string
    """
    return SUMMARY_TEMPLATE.format(item_type=item_type, content=content[:max_chars])
