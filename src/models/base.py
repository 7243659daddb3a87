"""Shared base for models persisted in the document store."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel


class StoredModel(BaseModel):
    """Adds conversion to a store item (no floats, ISO timestamps, plain enums)."""

    def to_item(self) -> Dict[str, Any]:
        item = self.model_dump(exclude_none=True)
        for key, value in item.items():
            if isinstance(value, datetime):
                item[key] = value.isoformat()
            elif isinstance(value, Enum):
                item[key] = value.value
        return item
