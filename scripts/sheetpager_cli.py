#!/usr/bin/env python3
"""
Paged Excel Export/Import CLI - Dual Mode

Import validation can operate in two modes:
1. Direct mode (default): Validates the workbook locally using services
2. API mode: Uploads the workbook to the FastAPI backend

Usage:
    # Show how a dataset is split into sheets and pages
    python scripts/sheetpager_cli.py plan --count 25000

    # Export a CSV file (first row is the header)
    python scripts/sheetpager_cli.py export --input users.csv --name users.xlsx

    # Export a database table page by page
    python scripts/sheetpager_cli.py export-table --table users --name users.xlsx

    # Validate and import a workbook
    python scripts/sheetpager_cli.py import --file users.xlsx --headers "name,email" [--api-url http://localhost:8000]
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import csv
import json
import logging
from typing import Optional

import click
import requests
from dotenv import load_dotenv
from sqlalchemy import MetaData, Table, create_engine, select
from sqlalchemy.orm import Session

from services.excel_export_service import ExcelExportService
from services.excel_import_service import ExcelImportService
from services.page_source import count_rows, query_page_fetcher
from services.partition_service import PAGE_SIZE, SHEET_SIZE, PartitionConfig, plan_partitions
from services.storage_service import DEFAULT_DOWNLOAD_DIR

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'cli.log')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger('sheetpager_cli')

# Configuration
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///sheetpager.db')
DOWNLOAD_DIR = os.getenv('DOWNLOAD_DIR', str(DEFAULT_DOWNLOAD_DIR))


def partition_options(f):
    f = click.option('--sheet-size', type=int, default=SHEET_SIZE, show_default=True,
                     help='Records per sheet (multiple of page size)')(f)
    f = click.option('--page-size', type=int, default=PAGE_SIZE, show_default=True,
                     help='Records per fetched page')(f)
    return f


def build_partition(page_size: int, sheet_size: int) -> PartitionConfig:
    try:
        return PartitionConfig(page_size=page_size, sheet_size=sheet_size)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.group()
def cli():
    """Paged Excel export and template-validated import."""


@cli.command('plan')
@click.option('--count', '-c', required=True, type=click.IntRange(min=0),
              help='Number of records to export')
@partition_options
def plan_cmd(count: int, page_size: int, sheet_size: int):
    """Show the sheet/page partition for a record count."""
    partition = build_partition(page_size, sheet_size)
    plans = plan_partitions(count, partition)

    click.echo(f"{count} records -> {len(plans)} sheets "
               f"(sheet_size={partition.sheet_size}, page_size={partition.page_size})")
    for plan in plans:
        pages = ', '.join(str(i) for i in plan.page_indices)
        click.echo(f"  Sheet {plan.number}: records {plan.start + 1}-{plan.end} "
                   f"({plan.size}), pages [{pages}]")


@cli.command('export')
@click.option('--input', '-i', 'input_file', required=True, type=click.Path(exists=True, dir_okay=False),
              help='CSV file to export (first row is the header)')
@click.option('--name', '-n', required=True, help='Output file name')
@click.option('--output-dir', '-o', default=DOWNLOAD_DIR, show_default=True, help='Output directory')
@partition_options
def export_cmd(input_file: str, name: str, output_dir: str, page_size: int, sheet_size: int):
    """Export a CSV file to a multi-sheet workbook."""
    click.echo(f"\n📁 Exporting: {input_file}")

    with open(input_file, newline='', encoding='utf-8') as fh:
        reader = csv.reader(fh)
        headers = next(reader, [])
        rows = list(reader)

    service = ExcelExportService(output_dir, build_partition(page_size, sheet_size))
    path = service.create_excel(headers, rows, lambda row: row, name)

    if path is None:
        click.echo("\n✗ Export failed (see log for details)", err=True)
        sys.exit(1)

    click.echo(f"\n✓ Exported {len(rows)} rows to {path}")


@cli.command('export-table')
@click.option('--table', '-t', required=True, help='Table to export')
@click.option('--name', '-n', required=True, help='Output file name')
@click.option('--database-url', envvar='DATABASE_URL', default=DATABASE_URL, help='SQLAlchemy database URL')
@click.option('--output-dir', '-o', default=DOWNLOAD_DIR, show_default=True, help='Output directory')
@partition_options
def export_table_cmd(table: str, name: str, database_url: str, output_dir: str,
                     page_size: int, sheet_size: int):
    """Export a database table page by page, ordered by primary key."""
    click.echo(f"\n🗄️  Exporting table: {table}")

    try:
        engine = create_engine(database_url)
        source = Table(table, MetaData(), autoload_with=engine)
        order_by = list(source.primary_key.columns) or list(source.columns)
        statement = select(source).order_by(*order_by)
        headers = [column.name for column in source.columns]

        service = ExcelExportService(output_dir, build_partition(page_size, sheet_size))

        with Session(engine) as session:
            total = count_rows(session, statement)
            click.echo(f"Rows: {total}")
            service.create_excel_by_page(
                headers,
                total,
                query_page_fetcher(session, statement, scalars=False),
                lambda row: ['' if value is None else str(value) for value in row],
                name
            )

        click.echo(f"\n✓ Exported {total} rows to {Path(output_dir) / name}")

    except Exception as e:
        logger.error(f"Table export failed: {e}", exc_info=True)
        click.echo(f"\n✗ Export failed: {e}", err=True)
        sys.exit(1)


@cli.command('import')
@click.option('--file', '-f', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Excel file to validate and import')
@click.option('--headers', '-H', 'headers', required=True, help='Comma-separated expected header row')
@click.option('--all-sheets', is_flag=True, help='Import every sheet instead of only the first')
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
def import_cmd(file: str, headers: str, all_sheets: bool, api_url: Optional[str]):
    """Validate a workbook against a header template and print its rows."""
    header_list = [h.strip() for h in headers.split(',') if h.strip()]

    if api_url:
        click.echo(f"🌐 API Mode: Using backend at {api_url}")
        outcome = import_via_api(api_url, file, headers, all_sheets)
    else:
        click.echo("💾 Direct Mode: Validating locally")
        outcome = import_direct(file, header_list, all_sheets)

    if not outcome['success']:
        click.echo(f"\n✗ Import failed: {outcome['message']}", err=True)
        sys.exit(1)

    click.echo(json.dumps(outcome['data'], ensure_ascii=False, indent=2))
    click.echo(f"\n✓ Imported {len(outcome['data'])} rows")


# ============================================================================
# Import Implementations
# ============================================================================

def import_direct(file_path: str, headers: list, all_sheets: bool) -> dict:
    """Validate the workbook with the local import service."""
    service = ExcelImportService()
    result = service.read_excel_path(
        headers,
        file_path,
        lambda row: {header: row.text(i) for i, header in enumerate(headers)},
        all_sheets=all_sheets
    )
    return result.model_dump()


def import_via_api(api_url: str, file_path: str, headers: str, all_sheets: bool) -> dict:
    """Upload the workbook to the validation endpoint."""
    try:
        with open(file_path, 'rb') as fh:
            response = requests.post(
                f"{api_url}/api/import/validate",
                files={'file': (Path(file_path).name, fh)},
                data={'headers': headers, 'all_sheets': str(all_sheets).lower()},
                timeout=300
            )
        response.raise_for_status()
        return response.json()

    except requests.exceptions.RequestException as e:
        logger.error(f"API request failed: {e}", exc_info=True)
        click.echo(f"\n✗ API request failed: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    cli()
