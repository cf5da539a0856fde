from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Front-end payloads: camelCase on the wire, snake_case accepted too."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class BulkSummaryOut(BaseModel):
    processed: int
    successful: int
    failed: int
    skipped: int = 0
    errors: list[dict] = []

    class Config:
        from_attributes = True
