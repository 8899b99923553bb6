"""
FastAPI application for paged Excel export and import.

This package contains the REST API used to validate uploaded workbooks,
build exports and download the generated files.
"""

__version__ = "1.0.0"
