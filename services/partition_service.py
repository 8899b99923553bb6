"""
Partition Service - Sheet and page planning for large exports.

This module computes how a dataset of a given size is split into bounded
sheets, and how every sheet is split into bounded query pages. It performs
no I/O and is shared by the export pipelines and the CLI.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# Default partition sizes
PAGE_SIZE = 5000
SHEET_SIZE = 10000


@dataclass(frozen=True)
class PartitionConfig:
    """
    Immutable page/sheet sizes.

    The sheet size must be a multiple of the page size so that a page never
    straddles two sheets.
    """

    page_size: int = PAGE_SIZE
    sheet_size: int = SHEET_SIZE

    def __post_init__(self):
        if self.page_size <= 0 or self.sheet_size <= 0:
            raise ValueError(
                f"Partition sizes must be positive (page_size={self.page_size}, "
                f"sheet_size={self.sheet_size})"
            )
        if self.sheet_size % self.page_size != 0:
            raise ValueError(
                f"sheet_size ({self.sheet_size}) must be a multiple of "
                f"page_size ({self.page_size})"
            )

    @property
    def pages_per_sheet(self) -> int:
        return self.sheet_size // self.page_size


DEFAULT_PARTITION = PartitionConfig()


class PageInfo(BaseModel):
    """Page descriptor handed to page-fetch callbacks."""

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(..., ge=1, description="Global page number (1-indexed)")
    page_size: int = Field(..., ge=1, description="Maximum records per page")
    records: int = Field(..., ge=0, description="Total number of records being exported")

    @property
    def offset(self) -> int:
        """Calculate offset for database query."""
        return (self.page_index - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit for database query."""
        return self.page_size


@dataclass(frozen=True)
class SheetPlan:
    """One sheet of a partition plan."""

    number: int
    size: int
    start: int
    page_indices: Tuple[int, ...]

    @property
    def sub_page_count(self) -> int:
        return len(self.page_indices)

    @property
    def end(self) -> int:
        return self.start + self.size

    def page_info(self, sub_page: int, page_size: int, total_count: int) -> PageInfo:
        """Build the descriptor for a 1-based sub-page of this sheet."""
        return PageInfo(
            page_index=self.page_indices[sub_page - 1],
            page_size=page_size,
            records=total_count,
        )


def sheet_count(total_count: int, config: PartitionConfig = DEFAULT_PARTITION) -> int:
    """Number of sheets needed for total_count records (ceiling division)."""
    if total_count < 0:
        raise ValueError(f"total_count must be >= 0, got {total_count}")
    return (total_count + config.sheet_size - 1) // config.sheet_size


def plan_partitions(
    total_count: int,
    config: PartitionConfig = DEFAULT_PARTITION
) -> List[SheetPlan]:
    """
    Partition total_count records into sheets and pages.

    Args:
        total_count: Number of records in the dataset
        config: Page and sheet sizes

    Returns:
        Ordered list of SheetPlan. Every sheet holds sheet_size records except
        the last, which holds the remainder. Global page indices start at 1
        and are contiguous across sheets. An empty dataset yields an empty plan.

    Raises:
        ValueError: If total_count is negative
    """
    sheets = sheet_count(total_count, config)
    plans = []

    for number in range(1, sheets + 1):
        start = config.sheet_size * (number - 1)
        size = min(config.sheet_size, total_count - start)
        sub_pages = (size + config.page_size - 1) // config.page_size
        first_index = config.pages_per_sheet * (number - 1)
        plans.append(SheetPlan(
            number=number,
            size=size,
            start=start,
            page_indices=tuple(first_index + j for j in range(1, sub_pages + 1)),
        ))

    logger.debug(f"Planned {len(plans)} sheets for {total_count} records "
                 f"(sheet_size={config.sheet_size}, page_size={config.page_size})")
    return plans
