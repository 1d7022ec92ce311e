"""
CSV Exporter for the users table.

CSV Format:
- UTF-8 with BOM (Excel-compatible)
- Semicolon separator (locales with comma as decimal separator)
- LF between rows, no trailing newline
- Fields quoted only when they contain the delimiter, a comma, CR, LF or a
  double quote; internal quotes are doubled
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional

from user_admin.clients.users import UserClient
from user_admin.core.config import settings
from user_admin.core.logging import audit_logger, get_logger
from user_admin.models.user import User

logger = get_logger(__name__)

BOM = "\ufeff"
DELIMITER = ";"
LINE_SEPARATOR = "\n"
MEDIA_TYPE = "text/csv;charset=utf-8;"
HEADERS = ["ID", "First", "Last", "Email", "Phone", "Location", "Hobby"]


def escape_field(value: Any, delimiter: str = DELIMITER) -> str:
    """
    Escape a single CSV field.

    Args:
        value: Field value; None becomes an empty string
        delimiter: Delimiter in use

    Returns:
        The field, quoted with doubled internal quotes when needed
    """
    text = "" if value is None else str(value)
    if any(ch in text for ch in (delimiter, ",", "\n", "\r", '"')):
        return '"' + text.replace('"', '""') + '"'
    return text


def user_row(user: User) -> List[Any]:
    """Column values of one user in header order."""
    return [
        user.id,
        user.first,
        user.last,
        user.email,
        user.phone or "",
        user.location or "",
        user.hobby or "",
    ]


@dataclass(frozen=True)
class CSVExport:
    """A rendered CSV file ready for download or writing to disk."""

    filename: str
    content: str
    row_count: int
    media_type: str = MEDIA_TYPE

    def as_bytes(self) -> bytes:
        # The BOM is already part of content
        return self.content.encode("utf-8")

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


class UsersCSVExporter:
    """
    Exports the full users table as a spreadsheet-friendly CSV.
    """

    def __init__(
        self,
        filename: Optional[str] = None,
        delimiter: str = DELIMITER,
    ):
        """
        Initialize CSV exporter.

        Args:
            filename: Download/file name, defaults to settings.export_filename
            delimiter: Field delimiter
        """
        self.filename = filename or settings.export_filename
        self.delimiter = delimiter

    def _format_row(self, values: Iterable[Any]) -> str:
        return self.delimiter.join(escape_field(v, self.delimiter) for v in values)

    def render(self, users: List[User]) -> str:
        """
        Render users as CSV text.

        Args:
            users: Users in the order they should appear

        Returns:
            BOM-prefixed CSV text
        """
        lines = [self._format_row(HEADERS)]
        lines.extend(self._format_row(user_row(user)) for user in users)
        return BOM + LINE_SEPARATOR.join(lines)

    def build(self, users: List[User]) -> CSVExport:
        """Render users into a CSVExport."""
        return CSVExport(
            filename=self.filename,
            content=self.render(users),
            row_count=len(users),
        )

    async def export(self, client: UserClient) -> CSVExport:
        """
        Fetch every user (no search filter) and render the export.

        Raises:
            FetchError: When the backend cannot be read
        """
        users = await client.list_users()
        result = self.build(users)
        audit_logger.log_csv_exported(result.filename, result.row_count)
        return result

    def write(self, export: CSVExport, output_dir: Path) -> Path:
        """
        Write an export to disk.

        Args:
            export: Rendered export
            output_dir: Target directory, created if missing

        Returns:
            Path to created CSV file
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        filepath = output_dir / export.filename

        with open(filepath, "wb") as f:
            f.write(export.as_bytes())

        logger.info(f"CSV exported: {filepath} ({export.row_count} rows)")
        return filepath
