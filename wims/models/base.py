"""
Shared pydantic base for persisted WIMS records.

Records are stored as camelCase JSON (``currentStock``, ``adminPricing``)
and exposed to Python code with snake_case attribute names.
"""

import time
import uuid
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def generate_id(prefix: str) -> str:
    """
    Generate a record identifier such as ``ORD-1718000000000-3f9a1c``.

    The millisecond timestamp keeps ids roughly sortable by creation time;
    the random suffix keeps ids created in the same millisecond distinct.
    """
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class WimsModel(BaseModel):
    """Base model for records persisted to local storage."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_storage(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape kept in local storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
