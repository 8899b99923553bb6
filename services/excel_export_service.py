"""
Excel Export Service - Framework-agnostic workbook generation.

This module writes arbitrarily large datasets into multi-sheet workbooks.
Data is either handed over as a materialized sequence, or pulled page by
page from a callback so that at most one page of records is held at a time.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, NamedStyle
from openpyxl.worksheet.worksheet import Worksheet

from services.partition_service import DEFAULT_PARTITION, PageInfo, PartitionConfig, plan_partitions
from services.storage_service import DEFAULT_DOWNLOAD_DIR, create_file, get_file_path_by_file_name

logger = logging.getLogger(__name__)

E = TypeVar('E')

RowMapper = Callable[[E], Sequence[str]]
PageFetcher = Callable[[PageInfo], Sequence[E]]

DEFAULT_SHEET_NAME_TEMPLATE = 'Page {}'
HEADER_STYLE_NAME = 'header'


class ExcelExportService:
    """
    Build workbooks from records and write them into the download directory.

    Every sheet starts with a centered header row at row 0, followed by one
    row per record.
    """

    def __init__(
        self,
        download_dir: Union[str, Path] = DEFAULT_DOWNLOAD_DIR,
        partition: PartitionConfig = DEFAULT_PARTITION,
        sheet_name_template: str = DEFAULT_SHEET_NAME_TEMPLATE
    ):
        """
        Initialize export service.

        Args:
            download_dir: Directory receiving exported files
            partition: Page and sheet sizes
            sheet_name_template: Format string receiving the 1-based sheet number
        """
        self.download_dir = Path(download_dir)
        self.partition = partition
        self.sheet_name_template = sheet_name_template

    def create_excel(
        self,
        headers: Sequence[str],
        records: Sequence[E],
        row_mapper: RowMapper,
        file_name: str
    ) -> Optional[Path]:
        """
        Export an in-memory sequence of records.

        Args:
            headers: Column names of the header row
            records: Records to export, in order
            row_mapper: Converts one record into its ordered cell strings
            file_name: Name of the output file inside the download directory

        Returns:
            Path of the written file, or None when a required argument is
            missing or the file could not be written
        """
        if not headers or not file_name or not records or row_mapper is None:
            logger.warning("Export skipped: headers, file name, records and row mapper are required")
            return None

        plans = plan_partitions(len(records), self.partition)
        wb = self._new_workbook()

        for plan in plans:
            ws = self._create_sheet(wb, plan.number, headers)
            sheet_data = records[plan.start:plan.end]
            for local_index, record in enumerate(sheet_data):
                self._write_row(ws, local_index + 1, row_mapper(record))

        logger.info(f"Built workbook with {len(plans)} sheets for {len(records)} records")

        file_path = get_file_path_by_file_name(file_name, self.download_dir)
        try:
            self._save_workbook(wb, file_path)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}", exc_info=True)
            return None

        return file_path

    def create_excel_by_page(
        self,
        headers: Sequence[str],
        total_count: int,
        page_fetcher: PageFetcher,
        row_mapper: RowMapper,
        file_name: str
    ) -> None:
        """
        Export a dataset that is fetched one page at a time.

        The fetcher is called once per page, in ascending global page order,
        with a PageInfo carrying the page index, page size and total count.
        Only the current page's records are referenced while it is written.

        Args:
            headers: Column names of the header row
            total_count: Number of records in the dataset
            page_fetcher: Returns the records of one page
            row_mapper: Converts one record into its ordered cell strings
            file_name: Name of the output file inside the download directory

        Raises:
            OSError: If the file cannot be written
            Exception: Anything raised by page_fetcher or row_mapper
        """
        if not headers or not file_name or page_fetcher is None or row_mapper is None:
            logger.warning("Export skipped: headers, file name, page fetcher and row mapper are required")
            return

        page_size = self.partition.page_size
        plans = plan_partitions(total_count, self.partition)
        wb = self._new_workbook()

        if not plans:
            self._create_sheet(wb, 1, headers)

        for plan in plans:
            ws = self._create_sheet(wb, plan.number, headers)

            for sub_page in range(1, plan.sub_page_count + 1):
                page_info = plan.page_info(sub_page, page_size, total_count)
                page_data = page_fetcher(page_info)

                if len(page_data) > page_size:
                    logger.warning(f"Page {page_info.page_index} returned {len(page_data)} records, "
                                   f"keeping the first {page_size}")
                    page_data = page_data[:page_size]

                row_offset = (sub_page - 1) * page_size
                for local_index, record in enumerate(page_data):
                    self._write_row(ws, row_offset + local_index + 1, row_mapper(record))

                logger.debug(f"Sheet {plan.number}: wrote page {page_info.page_index} "
                             f"({len(page_data)} records)")

        logger.info(f"Built workbook with {max(len(plans), 1)} sheets for {total_count} records")

        self._save_workbook(wb, get_file_path_by_file_name(file_name, self.download_dir))

    def sheet_name(self, number: int) -> str:
        return self.sheet_name_template.format(number)

    def _new_workbook(self) -> Workbook:
        """Create an empty workbook with the shared header style registered."""
        wb = Workbook()
        wb.remove(wb.active)
        wb.add_named_style(NamedStyle(
            name=HEADER_STYLE_NAME,
            alignment=Alignment(horizontal='center')
        ))
        return wb

    def _create_sheet(self, wb: Workbook, number: int, headers: Sequence[str]) -> Worksheet:
        ws = wb.create_sheet(title=self.sheet_name(number))
        self._create_sheet_header(ws, headers)
        return ws

    @staticmethod
    def _create_sheet_header(ws: Worksheet, headers: Sequence[str]):
        """Write the header row (row 0) with the shared centered style."""
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.style = HEADER_STYLE_NAME

    @staticmethod
    def _write_row(ws: Worksheet, row_index: int, values: Sequence[str]):
        """Write cell strings at a 0-based sheet row position."""
        for col, value in enumerate(values, start=1):
            ws.cell(row=row_index + 1, column=col, value=value)

    @staticmethod
    def _save_workbook(wb: Workbook, file_path: Path):
        """Serialize the whole workbook in a single write."""
        create_file(file_path)
        with open(file_path, 'wb') as fos:
            wb.save(fos)
        logger.info(f"Wrote workbook: {file_path}")
