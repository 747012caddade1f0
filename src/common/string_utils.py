"""String helpers for log output."""


def truncate_for_logging(
    text: str, max_length: int = 1000, edge_length: int = 500
) -> str:
    """
    Truncate text for logging, keeping the beginning and end.

    Args:
        text: Text to truncate
        max_length: Maximum length before truncation is applied
        edge_length: Number of characters to show from start and end

    Returns:
        Truncated text with ellipsis if needed, or original text if short enough

    Examples:
        >>> truncate_for_logging("Hello", max_length=100)
        'Hello'
        >>> "..." in truncate_for_logging("x" * 2000, max_length=1000, edge_length=10)
        True
    """
    if len(text) <= max_length:
        return text
    return f"{text[:edge_length]}...\n...{text[-edge_length:]}"


def preview_line(text: str, limit: int = 60) -> str:
    """
    Collapse a subtitle text onto one line for compact log messages.

    Examples:
        >>> preview_line("Hello\\nworld")
        'Hello / world'
        >>> preview_line("abcdef", limit=4)
        'abc…'
    """
    flat = " / ".join(part.strip() for part in text.splitlines() if part.strip())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 1] + "…"
