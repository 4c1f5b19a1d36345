from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from reports.terminal import EMPTY_MESSAGE
from table.pipeline import filtered_rows
from table.view import TableView

OUTPUT_DIR = Path(__file__).parent.parent / "output" / "reports"

BADGE_COLORS = {
    "cyan": colors.Color(0.14, 0.66, 0.92),
    "yellow": colors.Color(0.91, 0.56, 0.2),
    "green": colors.Color(0.0, 0.63, 0.32),
    "bright_black": colors.Color(0.51, 0.52, 0.5),
}


def _describe_filters(view: TableView) -> str:
    state = view.state
    parts = []
    if state.global_filter:
        parts.append(f"search \"{state.global_filter}\"")
    if state.column_filter:
        key, value = state.column_filter
        parts.append(f"{key} = {value}")
    if state.sorting:
        parts.append("sorted by " + ", ".join(
            f"{s.column} {'desc' if s.descending else 'asc'}" for s in state.sorting
        ))
    return "; ".join(parts) if parts else "no filters"


def generate_view_pdf(view: TableView, output_dir: Path | None = None, title: str = "Claims") -> Path:
    """Export every filtered, sorted row of a view (all pages) as a PDF table."""
    if output_dir is None:
        output_dir = OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    filename = f"{title.lower().replace(' ', '_')}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.pdf"
    output_path = output_dir / filename

    doc = SimpleDocTemplate(str(output_path), pagesize=landscape(letter),
                            leftMargin=0.4 * inch, rightMargin=0.4 * inch,
                            topMargin=0.5 * inch, bottomMargin=0.5 * inch)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("CustomTitle", parent=styles["Title"], fontSize=18, spaceAfter=12)
    small_style = ParagraphStyle("Small", parent=styles["BodyText"], fontSize=8, textColor=colors.grey)
    cell_style = ParagraphStyle("Cell", parent=styles["BodyText"], fontSize=7, leading=9)
    header_style = ParagraphStyle("HeaderCell", parent=cell_style, fontName="Helvetica-Bold")

    rows = filtered_rows(view.state, view.columns, view.global_filter)

    elements = []
    elements.append(Paragraph(escape(title), title_style))
    elements.append(Paragraph(
        f"Generated: {datetime.now().strftime('%B %d, %Y %I:%M %p')} | "
        f"{rows.height:,} rows | {escape(_describe_filters(view))}",
        small_style,
    ))
    elements.append(Spacer(1, 12))

    if rows.is_empty():
        elements.append(Paragraph(EMPTY_MESSAGE, styles["BodyText"]))
        doc.build(elements)
        return output_path

    header = [Paragraph(escape(c.label), header_style) for c in view.columns]
    badge_cell_styles = {
        name: ParagraphStyle(f"Badge-{name}", parent=cell_style, textColor=color)
        for name, color in BADGE_COLORS.items()
    }

    body = []
    for row in rows.iter_rows(named=True):
        cells = []
        for column in view.columns:
            text = escape(column.render_cell(row)).replace("\n", "<br/>")
            style = badge_cell_styles.get(column.badge_color(row), cell_style)
            cells.append(Paragraph(text, style))
        body.append(cells)

    table = Table([header] + body, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.Color(0.9, 0.9, 0.95)),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
    ]))
    elements.append(table)

    doc.build(elements)
    return output_path
