"""
Tests for workbook export, from a list and page by page.
"""

import pytest
from openpyxl import load_workbook

from services.excel_export_service import ExcelExportService


def record_cells(record):
    return [str(record['id']), record['name']]


def make_records(count):
    return [{'id': i, 'name': f'name {i}'} for i in range(1, count + 1)]


def sheet_values(path):
    wb = load_workbook(path)
    try:
        return {ws.title: [list(row) for row in ws.iter_rows(values_only=True)] for ws in wb.worksheets}
    finally:
        wb.close()


class TestCreateExcel:
    """Test export of an in-memory list."""

    def test_writes_header_and_rows(self, export_service):
        path = export_service.create_excel(['id', 'name'], make_records(3), record_cells, 'out.xlsx')

        assert path == export_service.download_dir / 'out.xlsx'
        assert path.is_file()
        assert sheet_values(path) == {
            'Page 1': [['id', 'name'], ['1', 'name 1'], ['2', 'name 2'], ['3', 'name 3']]
        }

    def test_header_cells_are_centered(self, export_service):
        path = export_service.create_excel(['id', 'name'], make_records(1), record_cells, 'out.xlsx')

        ws = load_workbook(path).worksheets[0]
        assert ws['A1'].alignment.horizontal == 'center'
        assert ws['B1'].alignment.horizontal == 'center'
        assert ws['A2'].alignment.horizontal is None

    def test_splits_into_sheets(self, small_export_service):
        path = small_export_service.create_excel(['id', 'name'], make_records(23), record_cells, 'out.xlsx')

        sheets = sheet_values(path)
        assert list(sheets) == ['Page 1', 'Page 2', 'Page 3']
        assert [len(rows) - 1 for rows in sheets.values()] == [10, 10, 3]
        assert sheets['Page 2'][1] == ['11', 'name 11']
        assert all(rows[0] == ['id', 'name'] for rows in sheets.values())

    def test_exact_multiple_has_no_empty_trailing_sheet(self, small_export_service):
        path = small_export_service.create_excel(['id', 'name'], make_records(20), record_cells, 'out.xlsx')
        assert list(sheet_values(path)) == ['Page 1', 'Page 2']

    def test_custom_sheet_names(self, tmp_path, small_partition):
        service = ExcelExportService(tmp_path, small_partition, sheet_name_template='Part {}')
        path = service.create_excel(['id', 'name'], make_records(11), record_cells, 'out.xlsx')
        assert list(sheet_values(path)) == ['Part 1', 'Part 2']

    @pytest.mark.parametrize('headers,records,mapper,file_name', [
        ([], make_records(1), record_cells, 'out.xlsx'),
        (['id'], [], record_cells, 'out.xlsx'),
        (['id'], make_records(1), None, 'out.xlsx'),
        (['id'], make_records(1), record_cells, ''),
    ])
    def test_missing_arguments_are_a_no_op(self, export_service, headers, records, mapper, file_name):
        assert export_service.create_excel(headers, records, mapper, file_name) is None
        assert not export_service.download_dir.exists()

    def test_same_input_gives_same_rows(self, small_export_service):
        records = make_records(15)
        first = small_export_service.create_excel(['id', 'name'], records, record_cells, 'a.xlsx')
        second = small_export_service.create_excel(['id', 'name'], records, record_cells, 'b.xlsx')

        assert first != second
        assert sheet_values(first) == sheet_values(second)

    def test_write_failure_returns_none(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        service = ExcelExportService(download_dir=blocker / 'downloads')

        assert service.create_excel(['id', 'name'], make_records(2), record_cells, 'out.xlsx') is None


class TestCreateExcelByPage:
    """Test export driven by a page-fetch callback."""

    def make_fetcher(self, records, calls):
        def fetch(page):
            calls.append(page)
            return records[page.offset:page.offset + page.limit]
        return fetch

    def test_fetches_each_page_once_in_order(self, small_export_service):
        records = make_records(23)
        calls = []

        small_export_service.create_excel_by_page(
            ['id', 'name'], len(records), self.make_fetcher(records, calls), record_cells, 'paged.xlsx'
        )

        assert [c.page_index for c in calls] == [1, 2, 3, 4, 5]
        assert all(c.page_size == 5 and c.records == 23 for c in calls)

    def test_rows_match_list_export(self, small_export_service):
        records = make_records(23)

        small_export_service.create_excel_by_page(
            ['id', 'name'], len(records), self.make_fetcher(records, []), record_cells, 'paged.xlsx'
        )
        listed = small_export_service.create_excel(['id', 'name'], records, record_cells, 'listed.xlsx')

        paged = small_export_service.download_dir / 'paged.xlsx'
        assert sheet_values(paged) == sheet_values(listed)

    def test_second_page_rows_follow_first_page(self, small_export_service):
        records = make_records(8)
        small_export_service.create_excel_by_page(
            ['id', 'name'], 8, self.make_fetcher(records, []), record_cells, 'paged.xlsx'
        )

        rows = sheet_values(small_export_service.download_dir / 'paged.xlsx')['Page 1']
        assert rows[5] == ['5', 'name 5']
        assert rows[6] == ['6', 'name 6']

    def test_zero_records_writes_header_only_sheet(self, small_export_service):
        calls = []
        small_export_service.create_excel_by_page(
            ['id', 'name'], 0, self.make_fetcher([], calls), record_cells, 'empty.xlsx'
        )

        assert calls == []
        assert sheet_values(small_export_service.download_dir / 'empty.xlsx') == {'Page 1': [['id', 'name']]}

    def test_oversized_page_is_truncated(self, small_export_service):
        records = make_records(5)

        def fetch(page):
            return records + [{'id': 99, 'name': 'extra'}]

        small_export_service.create_excel_by_page(['id', 'name'], 5, fetch, record_cells, 'paged.xlsx')

        rows = sheet_values(small_export_service.download_dir / 'paged.xlsx')['Page 1']
        assert [r[0] for r in rows[1:]] == ['1', '2', '3', '4', '5']

    def test_missing_fetcher_is_a_no_op(self, small_export_service):
        small_export_service.create_excel_by_page(['id'], 3, None, record_cells, 'paged.xlsx')
        assert not small_export_service.download_dir.exists()

    def test_fetcher_errors_propagate(self, small_export_service):
        def fetch(page):
            raise RuntimeError('database unavailable')

        with pytest.raises(RuntimeError, match='database unavailable'):
            small_export_service.create_excel_by_page(['id'], 3, fetch, record_cells, 'paged.xlsx')

        assert not (small_export_service.download_dir / 'paged.xlsx').exists()

    def test_write_failure_propagates(self, tmp_path, small_partition):
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        service = ExcelExportService(download_dir=blocker / 'downloads', partition=small_partition)

        with pytest.raises(OSError):
            service.create_excel_by_page(['id', 'name'], 2, lambda page: make_records(2),
                                         record_cells, 'paged.xlsx')
