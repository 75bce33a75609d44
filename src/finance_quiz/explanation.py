"""Explanation text formatting and diagram hand-off."""
import logging
import re
from typing import Callable

from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

logger = logging.getLogger(__name__)

DIAGRAM_RE = re.compile(r"```mermaid\n([\s\S]*?)```")
TABLE_RE = re.compile(r"\|(.+)\|\n\|[-\s|:]+\|\n((?:\|.+\|\n?)+)")
SEGMENT_RE = re.compile(f"{DIAGRAM_RE.pattern}|{TABLE_RE.pattern}")
ANSWER_MARKER_RE = re.compile(r"【(?:정답|Answer):[^】]+】\n?")
BULLET = "• "

# Leading marker -> style for section titles
SECTION_STYLES = {
    "📚": "bold blue",
    "✅": "bold green",
    "❌": "bold red",
    "💡": "bold yellow",
    "🔍": "bold cyan",
    "📊": "bold magenta",
}

DIAGRAM_PLACEHOLDER = "[red]Diagram rendering failed[/red]"

DiagramRenderer = Callable[[str], RenderableType]


def extract_diagrams(text: str) -> list[str]:
    """Raw diagram sources embedded in an explanation, in order."""
    return [code.strip() for code in DIAGRAM_RE.findall(text or "")]


def strip_answer_marker(text: str) -> str:
    return ANSWER_MARKER_RE.sub("", text)


def parse_table(header: str, body: str) -> Table:
    table = Table(show_header=True, header_style="bold")
    for cell in header.split("|"):
        if cell.strip():
            table.add_column(cell.strip())
    for row in body.strip().split("\n"):
        cells = [c.strip() for c in row.split("|") if c.strip()]
        table.add_row(*cells)
    return table


def format_text_block(block: str) -> Text:
    text = Text()
    for i, line in enumerate(block.split("\n")):
        if i:
            text.append("\n")
        style = next((s for marker, s in SECTION_STYLES.items() if line.startswith(marker)), None)
        if style:
            text.append(line, style=style)
        elif line.startswith(BULLET):
            text.append("  • ", style="dim")
            text.append(line[len(BULLET):])
        else:
            text.append(line)
    return text


def split_explanation(text: str) -> list[tuple[str, object]]:
    """Break an explanation into ("text", str), ("table", (header, body)) and
    ("diagram", source) segments."""
    if not text:
        return []
    text = strip_answer_marker(text)
    segments = []
    pos = 0
    for match in SEGMENT_RE.finditer(text):
        before = text[pos:match.start()].strip("\n")
        if before:
            segments.append(("text", before))
        if match.group(1) is not None:
            segments.append(("diagram", match.group(1).strip()))
        else:
            segments.append(("table", (match.group(2), match.group(3))))
        pos = match.end()
    rest = text[pos:].strip("\n")
    if rest:
        segments.append(("text", rest))
    return segments


def render_explanation(text: str) -> list[RenderableType]:
    """Renderables for the explanation body; diagrams are left to render_diagrams."""
    renderables = []
    diagram_no = 0
    for kind, payload in split_explanation(text):
        if kind == "text":
            renderables.append(format_text_block(payload))
        elif kind == "table":
            renderables.append(parse_table(*payload))
        else:
            diagram_no += 1
            renderables.append(Text(f"[diagram {diagram_no}]", style="dim"))
    return renderables


def default_diagram_renderer(source: str) -> RenderableType:
    return Panel(Text(source), title="diagram", border_style="blue")


def render_diagrams(sources, renderer: DiagramRenderer | None = None) -> list[RenderableType]:
    """Render each diagram independently; a failing one becomes a placeholder."""
    renderer = renderer or default_diagram_renderer
    rendered = []
    for i, source in enumerate(sources, 1):
        try:
            rendered.append(renderer(source))
        except Exception as e:
            logger.error("Diagram %d failed to render: %s", i, e)
            rendered.append(Panel(DIAGRAM_PLACEHOLDER, title=f"diagram {i}", border_style="red"))
    return rendered
