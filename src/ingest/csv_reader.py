"""Source CSV readers for ingestion.

This module streams delimited rows from local weather sensor exports.
Rows are yielded lazily so large files are never held in memory.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator

from core.errors import SourceReadError
from core.types import SourceRow


def iter_source_rows(source_path: Path) -> Iterator[SourceRow]:
    """Yield raw rows from one CSV file in file order.

    Args:
        source_path: Path to a delimited source file.

    Yields:
        Source rows with their one-based line numbers.

    Raises:
        SourceReadError: If the file is missing, unreadable, or malformed.
    """
    if not source_path.is_file():
        raise SourceReadError(
            f"Failed to read source at {source_path}: file does not exist. "
            "Provide an existing CSV file."
        )
    try:
        with source_path.open("r", encoding="utf-8", newline="") as handle:
            reader = csv.reader(handle)
            line_number = reader.line_num + 1
            for fields in reader:
                if fields:
                    yield SourceRow(
                        source_path=str(source_path),
                        line_number=line_number,
                        fields=tuple(fields),
                    )
                line_number = reader.line_num + 1
    except csv.Error as error:
        raise SourceReadError(
            f"Failed to parse CSV at {source_path}:{line_number}: {error}."
        ) from error
    except (OSError, UnicodeDecodeError) as error:
        raise SourceReadError(f"Failed to read source at {source_path}: {error}.") from error
