"""
CSV export of the users table.

Produces semicolon-separated, BOM-prefixed files for spreadsheet tools.
"""

from user_admin.export.csv_exporter import CSVExport, UsersCSVExporter, escape_field

__all__ = ["CSVExport", "UsersCSVExporter", "escape_field"]
