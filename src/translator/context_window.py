"""Build the above/target/below context block for a subtitle unit."""

from dataclasses import dataclass, field
from typing import List, Sequence

from translator.schemas import MAX_CONTEXT_LINES, MIN_CONTEXT_LINES

ABOVE_LABEL = "Above:"
TARGET_LABEL = "[Target]"
BELOW_LABEL = "Below:"


@dataclass(frozen=True)
class ContextWindow:
    """Neighbouring units around the unit being translated."""

    target: str
    above: List[str] = field(default_factory=list)
    below: List[str] = field(default_factory=list)

    def render(self) -> str:
        """
        Render the window as labeled sections separated by blank lines.

        Empty above/below sections are omitted entirely.
        """
        sections = []
        if self.above:
            sections.append(ABOVE_LABEL + "\n" + "\n".join(self.above))
        sections.append(TARGET_LABEL + "\n" + self.target)
        if self.below:
            sections.append(BELOW_LABEL + "\n" + "\n".join(self.below))
        return "\n\n".join(sections)


def build_context_window(
    texts: Sequence[str], position: int, window_size: int, coherence: bool = False
) -> ContextWindow:
    """
    Collect up to ``window_size`` units on each side of ``position``.

    Args:
        texts: All unit texts in original document order
        position: Positional index of the target unit
        window_size: Requested lines of context per side, clamped to [0, 3]
        coherence: Coherence mode needs at least one neighbour on each side

    Returns:
        ContextWindow for the target unit

    Raises:
        IndexError: If position is outside texts
    """
    if not 0 <= position < len(texts):
        raise IndexError(f"position {position} out of range for {len(texts)} units")

    size = max(MIN_CONTEXT_LINES, min(MAX_CONTEXT_LINES, window_size))
    if coherence:
        size = max(size, 1)

    return ContextWindow(
        target=texts[position],
        above=list(texts[max(0, position - size) : position]),
        below=list(texts[position + 1 : position + 1 + size]),
    )
