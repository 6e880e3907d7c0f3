"""Shared error message formatting utilities."""

from typing import Any, Iterable, Mapping

# Number of pydantic errors shown before collapsing the rest
MAX_VALIDATION_SNIPPETS = 3


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Format pydantic validation errors into a single line.

    Args:
        errors: Output of ``ValidationError.errors()``

    Returns:
        Message like "children.0: Input should be a valid dictionary; ... (2 more)"
    """
    error_list = list(errors)
    snippets = []
    for err in error_list:
        loc = ".".join(str(entry) for entry in err.get("loc", [])) or "<root>"
        msg = err.get("msg") or err.get("type") or "validation error"
        snippets.append(f"{loc}: {msg}")
        if len(snippets) >= MAX_VALIDATION_SNIPPETS:
            break
    remaining = len(error_list) - len(snippets)
    if remaining > 0:
        snippets.append(f"... ({remaining} more)")
    return "; ".join(snippets)


def format_id_list(node_ids: Iterable[str]) -> str:
    """Format node ids for messages, e.g. "'A', 'B'"."""
    return ", ".join(repr(node_id) for node_id in node_ids)
