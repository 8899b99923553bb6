"""
Pytest configuration and fixtures for export/import tests.
"""

import io

import pytest
from openpyxl import Workbook
from sqlalchemy import String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from services.excel_export_service import ExcelExportService
from services.excel_import_service import ExcelImportService, FileUpload
from services.partition_service import PartitionConfig


class Base(DeclarativeBase):
    pass


class Person(Base):
    """Table used as a paged export source."""

    __tablename__ = 'people'

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(100))


@pytest.fixture
def headers():
    return ['id', 'name', 'email', 'city']


@pytest.fixture
def small_partition():
    """Tiny sizes so multi-sheet behavior is cheap to exercise."""
    return PartitionConfig(page_size=5, sheet_size=10)


@pytest.fixture
def export_service(tmp_path):
    return ExcelExportService(download_dir=tmp_path / 'downloads')


@pytest.fixture
def small_export_service(tmp_path, small_partition):
    return ExcelExportService(download_dir=tmp_path / 'downloads', partition=small_partition)


@pytest.fixture
def import_service():
    return ExcelImportService()


@pytest.fixture
def make_upload():
    """Build an in-memory .xlsx upload from a list of rows (first row is the header)."""
    def _make(rows, filename='data.xlsx', extra_sheets=None):
        wb = Workbook()
        ws = wb.active
        for row in rows:
            ws.append(row)
        for sheet_rows in extra_sheets or []:
            extra = wb.create_sheet()
            for row in sheet_rows:
                extra.append(row)
        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return FileUpload(filename, buffer)

    return _make


@pytest.fixture
def make_xls_upload():
    """Build an in-memory legacy .xls upload; each entry of sheets is a list of rows."""
    xlwt = pytest.importorskip('xlwt')

    def _make(*sheets, filename='data.xls'):
        wb = xlwt.Workbook()
        for n, rows in enumerate(sheets, start=1):
            ws = wb.add_sheet(f'Sheet{n}')
            for r, row in enumerate(rows):
                for c, value in enumerate(row):
                    ws.write(r, c, value)
        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return FileUpload(filename, buffer)

    return _make


@pytest.fixture(scope='function')
def engine():
    """Create an in-memory SQLite engine with the test schema."""
    eng = create_engine('sqlite://')
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    with Session(engine) as sess:
        yield sess


@pytest.fixture
def people(session):
    """Insert 23 people and return them in id order."""
    rows = [Person(id=i, name=f'person {i}', email=f'p{i}@example.com') for i in range(1, 24)]
    session.add_all(rows)
    session.commit()
    return rows
