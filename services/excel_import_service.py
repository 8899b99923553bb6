"""
Excel Import Service - Framework-agnostic template validation and row import.

This module validates an uploaded workbook against an expected header row
and converts its data rows into records through a caller-supplied mapping
function. Validation runs over the whole sheet before any row is converted,
so a failed import never returns partial output.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union
from zipfile import BadZipFile

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from services.result_model import ResultModel

logger = logging.getLogger(__name__)

E = TypeVar('E')

XLSX_SUFFIXES = ('.xlsx', '.XLSX')
XLS_SUFFIXES = ('.xls', '.XLS')

MSG_INVALID_PARAMS = "Invalid parameters!"
MSG_NOT_EXCEL = "Not an Excel file type!"
MSG_UNREADABLE = "Unable to read the Excel document!"
MSG_EMPTY_SHEET = "Sheet content is empty!"
MSG_TEMPLATE_MISMATCH = "Template error, please download the latest template!"
MSG_EMPTY_COLUMN = "Column [{}] contains empty data!"
MSG_READ_ERROR = "Error reading Excel file, please try again later!"

# Errors raised by the readers for documents that are not valid workbooks
DOCUMENT_ERRORS = (InvalidFileException, BadZipFile, KeyError, xlrd.XLRDError)


@dataclass
class FileUpload:
    """Uploaded file handle (same shape as Starlette's UploadFile)."""

    filename: Optional[str]
    file: BinaryIO


class SheetRow:
    """One data row handed to the row mapping function."""

    __slots__ = ('index', 'values', 'sheet_name')

    def __init__(self, index: int, values: Optional[Sequence[Any]], sheet_name: Optional[str] = None):
        self.index = index
        self.values = tuple(values) if values is not None else ()
        self.sheet_name = sheet_name

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"SheetRow(index={self.index}, values={self.values!r})"

    def value(self, column: int) -> Any:
        """Raw cell value, None for a missing cell."""
        if 0 <= column < len(self.values):
            return self.values[column]
        return None

    def text(self, column: int) -> str:
        """Trimmed cell text, '' for a missing cell."""
        return cell_text(self.value(column))


RowMapper = Callable[[SheetRow], E]
LoadedSheet = Tuple[str, List[Sequence[Any]]]


def cell_text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def is_match_header(value: Any, name: str) -> bool:
    """Check a header cell against the expected column name (trimmed, case-sensitive)."""
    return value is not None and cell_text(value) == name


def is_empty(value: Any) -> bool:
    """Check whether a cell is missing or blank."""
    return cell_text(value) == ''


def is_satisfy_suffix(file_name: Optional[str], suffixes: Iterable[str]) -> bool:
    if not file_name:
        return False
    return any(file_name.endswith(suffix) for suffix in suffixes)


class ExcelImportService:
    """
    Validate and import workbooks with a fixed header template.

    Checks run in order and stop at the first failure:
    parameters, file type, sheet content, header row, empty cells.
    Rows are only converted after every check has passed.
    """

    def read_excel(
        self,
        headers: Sequence[str],
        file: Optional[FileUpload],
        row_mapper: RowMapper,
        all_sheets: bool = False
    ) -> ResultModel:
        """
        Import an uploaded workbook.

        Args:
            headers: Expected header row, in column order
            file: Uploaded file (anything with .filename and a binary .file)
            row_mapper: Converts one SheetRow into a record
            all_sheets: Import every sheet instead of only the first one.
                The first sheet must hold data; later sheets that are empty
                or header-only are skipped without a header check.

        Returns:
            ResultModel with the records in row order on success, or the
            failure message and an empty data list
        """
        result = ResultModel()
        if not headers or file is None or row_mapper is None:
            return result.fail(MSG_INVALID_PARAMS)

        xlsx_flag = is_satisfy_suffix(file.filename, XLSX_SUFFIXES)
        if not xlsx_flag and not is_satisfy_suffix(file.filename, XLS_SUFFIXES):
            logger.warning(f"Rejected non-Excel upload: {file.filename!r}")
            return result.fail(MSG_NOT_EXCEL)

        try:
            sheets = self._load_sheets(file.file, xlsx_flag, all_sheets)
        except DOCUMENT_ERRORS as e:
            logger.warning(f"Unreadable workbook {file.filename!r}: {e}")
            return result.fail(MSG_UNREADABLE)
        except OSError as e:
            logger.error(f"I/O error reading {file.filename!r}: {e}", exc_info=True)
            return result.fail(MSG_READ_ERROR)

        if not sheets or len(sheets[0][1]) <= 1:
            return result.fail(MSG_EMPTY_SHEET)

        # Later sheets with no data rows are skipped
        skipped = [name for name, rows in sheets[1:] if len(rows) <= 1]
        if skipped:
            logger.info(f"Skipping sheets without data in {file.filename!r}: {skipped}")
            sheets = sheets[:1] + [sheet for sheet in sheets[1:] if len(sheet[1]) > 1]

        for sheet_name, rows in sheets:
            header_row = SheetRow(0, rows[0], sheet_name)
            for i, header in enumerate(headers):
                if not is_match_header(header_row.value(i), header):
                    logger.warning(f"Header mismatch in {file.filename!r} sheet {sheet_name!r}, column {i}")
                    return result.fail(MSG_TEMPLATE_MISMATCH)

        # Check every cell before converting any row
        for sheet_name, rows in sheets:
            for i in range(1, len(rows)):
                row = SheetRow(i, rows[i], sheet_name)
                for column, header in enumerate(headers):
                    if is_empty(row.value(column)):
                        logger.warning(f"Empty cell in {file.filename!r} sheet {sheet_name!r}, "
                                       f"row {i}, column {header!r}")
                        return result.fail(MSG_EMPTY_COLUMN.format(header))

        data = []
        for sheet_name, rows in sheets:
            for i in range(1, len(rows)):
                data.append(row_mapper(SheetRow(i, rows[i], sheet_name)))

        result.data = data
        logger.info(f"Imported {len(data)} rows from {file.filename!r} ({len(sheets)} sheets)")
        return result.succeed()

    def read_excel_path(
        self,
        headers: Sequence[str],
        file_path: Union[str, Path],
        row_mapper: RowMapper,
        all_sheets: bool = False
    ) -> ResultModel:
        """Import a workbook from the local filesystem."""
        path = Path(file_path)
        try:
            with open(path, 'rb') as fh:
                return self.read_excel(headers, FileUpload(path.name, fh), row_mapper, all_sheets)
        except OSError as e:
            logger.error(f"Cannot open {path}: {e}", exc_info=True)
            return ResultModel().fail(MSG_READ_ERROR)

    @staticmethod
    def _load_sheets(stream: BinaryIO, xlsx_flag: bool, all_sheets: bool) -> List[LoadedSheet]:
        """Read the cell values of the first (or every) sheet."""
        if xlsx_flag:
            wb = load_workbook(stream, read_only=True, data_only=True)
            try:
                worksheets = wb.worksheets if all_sheets else wb.worksheets[:1]
                return [(ws.title, list(ws.iter_rows(values_only=True))) for ws in worksheets]
            finally:
                wb.close()

        book = xlrd.open_workbook(file_contents=stream.read())
        try:
            sheets = book.sheets() if all_sheets else book.sheets()[:1]
            return [(s.name, [s.row_values(i) for i in range(s.nrows)]) for s in sheets]
        finally:
            book.release_resources()
