from .orchestrator import check_for_duplicates, import_csv, map_to_record, validate_csv
from .parser import build_import_row, parse_csv

__all__ = [
    "parse_csv",
    "build_import_row",
    "import_csv",
    "validate_csv",
    "check_for_duplicates",
    "map_to_record",
]
