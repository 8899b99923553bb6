"""
Tests for the SQL page source used by paged exports.
"""

from sqlalchemy import select

from services.excel_import_service import ExcelImportService
from services.page_source import count_rows, query_page_fetcher
from services.partition_service import PageInfo

from conftest import Person


class TestQueryPageFetcher:
    """Test offset/limit paging over a SELECT."""

    def test_count_rows(self, session, people):
        statement = select(Person).order_by(Person.id)
        assert count_rows(session, statement) == 23

    def test_pages_are_contiguous(self, session, people):
        fetch = query_page_fetcher(session, select(Person).order_by(Person.id))

        first = fetch(PageInfo(page_index=1, page_size=10, records=23))
        third = fetch(PageInfo(page_index=3, page_size=10, records=23))

        assert [p.id for p in first] == list(range(1, 11))
        assert [p.id for p in third] == [21, 22, 23]

    def test_row_tuples(self, session, people):
        fetch = query_page_fetcher(session, select(Person.id, Person.name).order_by(Person.id), scalars=False)

        rows = fetch(PageInfo(page_index=2, page_size=5, records=23))

        assert [tuple(r) for r in rows][0] == (6, 'person 6')

    def test_paged_export_of_table(self, session, people, small_export_service):
        statement = select(Person).order_by(Person.id)
        headers = ['id', 'name', 'email']

        small_export_service.create_excel_by_page(
            headers,
            count_rows(session, statement),
            query_page_fetcher(session, statement),
            lambda p: [str(p.id), p.name, p.email],
            'people.xlsx'
        )

        result = ExcelImportService().read_excel_path(
            headers,
            small_export_service.download_dir / 'people.xlsx',
            lambda row: int(row.text(0)),
            all_sheets=True
        )

        assert result.success
        assert result.data == list(range(1, 24))
