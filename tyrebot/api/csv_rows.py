"""
Row contract of knowledge-base CSV uploads.

An upload must carry ``category``, ``question`` and ``answer`` columns and may
carry ``keywords`` (comma-separated inside the cell). Header names are matched
case-insensitively. ``KnowledgeCsv`` is a lazy sequence: rows are parsed while
the caller consumes them, and iterating again starts over from the first row.
"""

import csv
import io
from typing import Iterator

from tyrebot.pipeline.errors import InputError

REQUIRED_COLUMNS = ("category", "question", "answer")


class CsvFormatError(InputError):
    pass


def split_keywords(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [keyword.strip() for keyword in raw.split(",") if keyword.strip()]


class KnowledgeCsv:
    """
    Parsed view of an uploaded CSV file.

    Parameters
    ----------
    payload : bytes
        Raw upload. A UTF-8 byte-order mark is tolerated.
    """

    def __init__(self, payload: bytes):
        try:
            self.text = payload.decode("utf-8-sig")
        except UnicodeDecodeError as error:
            raise CsvFormatError("CSV file must be UTF-8 encoded") from error

    def __iter__(self) -> Iterator[dict]:
        reader = csv.DictReader(io.StringIO(self.text, newline=""))
        columns = [(name or "").strip().lower() for name in (reader.fieldnames or [])]
        missing = [column for column in REQUIRED_COLUMNS if column not in columns]
        if missing:
            raise CsvFormatError(f"CSV is missing required columns: {', '.join(missing)}")

        for raw_row in reader:
            row = {
                (name or "").strip().lower(): (value or "").strip()
                for name, value in raw_row.items()
                if isinstance(value, str) or value is None
            }
            empty = [column for column in REQUIRED_COLUMNS if not row.get(column)]
            if empty:
                # line_num is the last physical line of the record, so quoted multi-line cells count
                raise CsvFormatError(f"Line {reader.line_num}: missing {', '.join(empty)}")
            yield {
                "category": row["category"],
                "question": row["question"],
                "answer": row["answer"],
                "keywords": split_keywords(row.get("keywords")),
            }
