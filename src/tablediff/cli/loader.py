"""
CSV loading for the command line.

The first record is the header; every cell is kept as a string.
"""

import csv
import logging

from tablediff.errors import SchemaError
from tablediff.models import Dataset
from tablediff.utils.tracing import trace_function

logger = logging.getLogger(__name__)


@trace_function(component="cli")
def load_csv(path: str, encoding: str = "utf-8-sig") -> Dataset:
    with open(path, newline="", encoding=encoding) as f:
        reader = csv.reader(f)
        try:
            headers = next(reader)
        except StopIteration:
            raise SchemaError(f"{path} is empty; expected a header row") from None
        rows = [tuple(record) for record in reader if record]

    logger.info(f"Loaded {len(rows)} rows with {len(headers)} columns from {path}")
    return Dataset(headers=tuple(headers), rows=tuple(rows))
