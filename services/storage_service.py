"""
Storage Service - Output file locations and download naming.

This module provides utilities for placing exported workbooks on disk and
for encoding their names when they are served over HTTP.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote_plus

logger = logging.getLogger(__name__)

# Default storage directory
DEFAULT_DOWNLOAD_DIR = Path.home() / 'Downloads' / 'sheetpager'

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
PATH_DATE_FORMAT = '%Y-%m-%d %H%M%S'


def format_date(value: datetime, fmt: str = DATE_FORMAT) -> str:
    """Render a datetime the way it is written into exported cells."""
    return value.strftime(fmt)


def timestamped_file_name(prefix: str, suffix: str = '.xlsx',
                          now: Optional[datetime] = None) -> str:
    """
    Build a file name such as 'users 2026-10-19 161800.xlsx'.

    Args:
        prefix: Leading part of the name
        suffix: File extension including the dot
        now: Timestamp to use (default: current local time)
    """
    stamp = (now or datetime.now()).strftime(PATH_DATE_FORMAT)
    return f"{prefix} {stamp}{suffix}"


def get_file_path_by_file_name(file_name: str,
                               download_dir: Union[str, Path] = DEFAULT_DOWNLOAD_DIR) -> Path:
    """Join the download directory and a file name."""
    return Path(download_dir) / file_name


def resolve_download_path(file_name: str,
                          download_dir: Union[str, Path] = DEFAULT_DOWNLOAD_DIR) -> Optional[Path]:
    """
    Resolve a requested file name inside the download directory.

    Returns:
        The resolved path, or None if the name escapes the directory
    """
    base = Path(download_dir).resolve()
    candidate = (base / file_name).resolve()
    if candidate.parent != base:
        logger.warning(f"Rejected download path outside {base}: {file_name!r}")
        return None
    return candidate


def create_file(file_path: Union[str, Path]) -> Path:
    """
    Ensure a file and its parent directories exist.

    Raises:
        OSError: If the directory or file cannot be created
    """
    path = Path(file_path)
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        logger.debug(f"Created file: {path}")
    return path


def encode_download_filename(user_agent: Optional[str], file_name: str) -> str:
    """
    Encode a file name for a Content-Disposition header.

    Firefox gets the UTF-8 bytes reinterpreted as Latin-1; every other client
    gets form URL encoding, with '~' escaped as '%7E'. In both cases '+' is
    replaced with '%20' afterwards, so spaces never come through as '+'.
    """
    if user_agent and 'Firefox' in user_agent:
        encoded = file_name.encode('utf-8').decode('latin-1')
    else:
        encoded = quote_plus(file_name, safe='*', encoding='utf-8').replace('~', '%7E')

    return encoded.replace('+', '%20')


def content_disposition(user_agent: Optional[str], file_name: str) -> str:
    """Attachment header value for a download."""
    return f'attachment; filename="{encode_download_filename(user_agent, file_name)}"'
