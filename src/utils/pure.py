from datetime import datetime
from typing import List, Literal, Optional


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of values (converted with str()).
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table, or "" when there are no rows.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [_md_cell(h) for h in headers]
    rows = [[_md_cell(c) for c in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def _md_cell(value) -> str:
    # pipes and newlines would break the row
    return str(value).replace("|", "\\|").replace("\n", " ")


def format_money(amount: float) -> str:
    return f"${amount:,.2f}"


def format_rating(avg: Optional[float]) -> str:
    return "N/A" if avg is None else f"{avg:.1f}"


def format_display_date(when: datetime) -> str:
    """'Oct 19, 2026' style date used on orders and notifications."""
    return f"{when:%b} {when.day}, {when.year}"


def format_display_time(when: datetime) -> str:
    """'03:45 PM' style time used on notifications."""
    return when.strftime("%I:%M %p")
