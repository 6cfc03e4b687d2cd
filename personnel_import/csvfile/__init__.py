from .columns import COLUMN_MAP, DATE_COLUMNS
from .reader import CsvTable, RawRow, detect_delimiter, read_csv_stream

__all__ = [
    "COLUMN_MAP",
    "DATE_COLUMNS",
    "CsvTable",
    "RawRow",
    "detect_delimiter",
    "read_csv_stream",
]
