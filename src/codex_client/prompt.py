"""Prompt construction for selection-based completion commands."""

from __future__ import annotations

FIX_INSTRUCTION = "Fix the bugs in the code above."
EXPLAIN_INSTRUCTION = "Explain what the code above does."
GENERATE_TESTS_INSTRUCTION = "Write unit tests for the code above."
REFACTOR_INSTRUCTION = "Refactor the code above to be simpler and more readable."


def build_prompt(selection_text: str, instruction: str | None = None, comment_marker: str = "#") -> str:
    """
    Append ``instruction`` to ``selection_text`` as a trailing line comment.

    ``comment_marker`` comes from the editing context (``#``, ``//``, ``;;``...).
    With no instruction the selection is returned verbatim.
    """
    if instruction is None:
        return selection_text
    return f"{selection_text}\n{comment_marker} {instruction}"
