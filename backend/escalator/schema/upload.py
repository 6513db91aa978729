from typing import List

from escalator.schema.base import CamelModel
from escalator.schema.record import ParsedRow


class ParseResult(CamelModel):
    # Parsed sheet before anything is stored
    upload_id: str
    filename: str
    total_rows: int
    pending_count: int
    pending: List[ParsedRow]


class UploadResponse(CamelModel):
    upload_id: str
    filename: str
    total_rows: int
    pending_count: int
    stored_count: int
