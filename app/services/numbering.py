from datetime import date

from sqlalchemy import Integer, cast, func, select
from sqlalchemy.orm import Session

DELIVERY_PREFIX = "DLV"
ISSUE_PREFIX = "ISS"
TRANSFER_PREFIX = "TRF"


def next_document_number(db: Session, column, prefix: str, on_date: date | None = None) -> str:
    year = (on_date or date.today()).year
    stem = f"{prefix}-{year}-"
    # Suffixes compare as integers so DLV-2025-1000 follows DLV-2025-999.
    sequence = cast(func.substr(column, len(stem) + 1), Integer)
    last_sequence = db.scalar(select(func.max(sequence)).where(column.startswith(stem)))
    return f"{stem}{(last_sequence or 0) + 1:03d}"
