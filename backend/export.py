"""CSV/TSV export of timeline entries for billing import."""
import csv
import io
import unicodedata
from datetime import date
from typing import Iterable, Literal
from urllib.parse import quote

from lookups import client_name, task_name

ExportFormat = Literal["csv", "tsv"]

HEADERS = ["Date", "Type", "Name", "Client", "Task", "Our Docket #", "Description", "Time Spent"]

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "tsv": "text/tab-separated-values; charset=utf-8",
}


def format_entries(entries: Iterable, export_format: ExportFormat = "csv") -> str:
    """Render entries as a delimited table with a header row."""
    delimiter = "," if export_format == "csv" else "\t"
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow(HEADERS)
    for entry in entries:
        writer.writerow(
            [
                entry.date.strftime("%m/%d/%Y"),
                "Time",
                entry.user_name,
                client_name(entry.client),
                task_name(entry.task),
                entry.docket_number or "",
                entry.description,
                entry.time_spent,
            ]
        )
    return buffer.getvalue()


def export_filename(user_name: str, export_format: ExportFormat, today: date | None = None) -> str:
    """e.g. '2024-03-08 Rohit Singh.csv'; TSV exports use a .txt extension."""
    today = today or date.today()
    extension = "csv" if export_format == "csv" else "txt"
    return f"{today.strftime('%Y-%m-%d')} {user_name}.{extension}"


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the exact UTF-8 name."""
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = "".join(c for c in fallback if c.isprintable() and c not in '"\\')
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
