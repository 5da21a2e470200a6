"""
Spreadsheet reading for order and settlement uploads (XLSX and CSV).
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence
from zipfile import BadZipFile

from dateutil import parser as date_parser
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

CSV_DELIMITERS = ";,\t"


class TabularFileError(ValueError):
    """File cannot be read as a spreadsheet"""


@dataclass
class TabularFile:
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    sheet_name: Optional[str] = None


def make_headers_unique(headers: Sequence[Any]) -> List[str]:
    """Trim headers; repeated names get a __2, __3 suffix, blanks become 'Unnamed'"""
    seen: Dict[str, int] = {}
    unique = []
    for raw in headers:
        name = str(raw if raw is not None else "").strip() or "Unnamed"
        count = seen.get(name, 0) + 1
        seen[name] = count
        unique.append(name if count == 1 else f"{name}__{count}")
    return unique


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def rows_from_matrix(matrix: Iterable[Sequence[Any]], sheet_name: Optional[str] = None) -> TabularFile:
    """First non-empty row is the header; fully empty rows are skipped"""
    result = TabularFile(sheet_name=sheet_name)
    for values in matrix:
        values = list(values)
        if all(_is_blank(v) for v in values):
            continue
        if not result.headers:
            result.headers = make_headers_unique(values)
            continue
        row = {}
        for index, header in enumerate(result.headers):
            value = values[index] if index < len(values) else None
            row[header] = value.strip() if isinstance(value, str) else value
        result.rows.append(row)
    return result


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def read_csv(content: bytes) -> TabularFile:
    text = _decode(content)
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=CSV_DELIMITERS)
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = ","
    return rows_from_matrix(csv.reader(io.StringIO(text), delimiter=delimiter))


def read_workbook(content: bytes) -> Dict[str, TabularFile]:
    """Every sheet of an XLSX workbook, keyed by sheet name"""
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as e:
        raise TabularFileError(f"Arquivo XLSX inválido: {e}") from e

    try:
        return {
            sheet.title: rows_from_matrix(sheet.iter_rows(values_only=True), sheet.title)
            for sheet in workbook.worksheets
        }
    finally:
        workbook.close()


def find_sheet(sheets: Dict[str, TabularFile], *names: str) -> Optional[TabularFile]:
    """Sheet by case-insensitive name"""
    wanted = {n.lower() for n in names}
    for title, sheet in sheets.items():
        if title.strip().lower() in wanted:
            return sheet
    return None


def read_tabular_file(filename: str, content: bytes) -> TabularFile:
    """First sheet of an XLSX file, or a CSV file with sniffed delimiter"""
    name = (filename or "").lower()
    if name.endswith((".xlsx", ".xlsm")):
        sheets = read_workbook(content)
        if not sheets:
            raise TabularFileError("Planilha sem abas.")
        result = next(iter(sheets.values()))
    elif name.endswith((".csv", ".txt")):
        result = read_csv(content)
    else:
        raise TabularFileError("Formato não suportado. Envie um arquivo .xlsx ou .csv.")

    logger.info(f"Read {filename}: {len(result.headers)} columns, {len(result.rows)} rows")
    return result


def parse_date_value(value: Any) -> Optional[datetime]:
    """Cell value as a naive UTC datetime, None when empty or unparseable"""
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = date_parser.parse(str(value).strip())
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
