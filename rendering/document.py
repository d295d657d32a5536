"""Format-agnostic document tree shared by the PDF and DOCX backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


@dataclass(slots=True)
class TextRun:
    """A span of text with inline formatting."""

    text: str
    bold: bool = False
    underline: bool = False


@dataclass(slots=True)
class Paragraph:
    runs: list[TextRun]
    align: Alignment = Alignment.LEFT
    first_line_indent: bool = False

    @classmethod
    def plain(
        cls,
        text: str,
        bold: bool = False,
        align: Alignment = Alignment.LEFT,
        first_line_indent: bool = False,
    ) -> Paragraph:
        return cls([TextRun(text, bold=bold)], align=align, first_line_indent=first_line_indent)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(slots=True)
class Heading:
    text: str
    align: Alignment = Alignment.LEFT
    underline: bool = False


@dataclass(slots=True)
class NumberedItem:
    """A numbered request; ``label`` is e.g. ``REQUEST FOR ADMISSION NO. 3:``."""

    label: str
    text: str


@dataclass(slots=True)
class Caption:
    """Two-column pleading caption: parties on the left, title on the right."""

    left_lines: list[str]
    right_lines: list[str]


@dataclass(slots=True)
class PartyLines:
    """Aligned ``LABEL: value`` lines such as PROPOUNDING PARTY."""

    entries: list[tuple[str, str]]


@dataclass(slots=True)
class SignatureBlock:
    lines: list[str]
    align: Alignment = Alignment.LEFT


@dataclass(slots=True)
class Spacer:
    lines: int = 1


@dataclass(slots=True)
class PageBreak:
    pass


Block = Union[Paragraph, Heading, NumberedItem, Caption, PartyLines, SignatureBlock, Spacer, PageBreak]


@dataclass(slots=True)
class LegalDocument:
    """An ordered list of blocks plus page furniture.

    ``pleading_paper`` asks backends for line numbers and the left rule;
    ``footer_title`` is printed under the page number on every page.
    """

    title: str
    blocks: list[Block] = field(default_factory=list)
    footer_title: str = ""
    pleading_paper: bool = True

    def add(self, *blocks: Block) -> LegalDocument:
        self.blocks.extend(blocks)
        return self


def render_text(document: LegalDocument) -> str:
    """Render a document tree as plain text."""
    lines: list[str] = []
    for block in document.blocks:
        if isinstance(block, Paragraph):
            lines.append(block.text)
        elif isinstance(block, Heading):
            lines.append(block.text)
        elif isinstance(block, NumberedItem):
            lines.append(block.label)
            lines.append(block.text)
        elif isinstance(block, Caption):
            width = max((len(line) for line in block.left_lines), default=0)
            for index in range(max(len(block.left_lines), len(block.right_lines))):
                left = block.left_lines[index] if index < len(block.left_lines) else ""
                right = block.right_lines[index] if index < len(block.right_lines) else ""
                lines.append(f"{left.ljust(width)} ) {right}".rstrip())
        elif isinstance(block, PartyLines):
            width = max((len(label) for label, _ in block.entries), default=0)
            lines.extend(f"{(label + ':').ljust(width + 2)}{value}" for label, value in block.entries)
        elif isinstance(block, SignatureBlock):
            lines.extend(block.lines)
        elif isinstance(block, Spacer):
            lines.extend([""] * block.lines)
        elif isinstance(block, PageBreak):
            lines.append("\f")
    return "\n".join(lines).rstrip() + "\n"
