"""Fixed catalogs of bookable rooms and equipment."""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .config import Settings
from .models import ResourceType


class ResourceCatalog(BaseModel):
    rooms: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResourceCatalog":
        return cls(rooms=list(settings.room_catalog), equipment=list(settings.equipment_catalog))

    def options(self, resource_type: Optional[Union[ResourceType, str]]) -> List[str]:
        """Resource names for a type; empty for a blank or unknown type."""
        if resource_type == ResourceType.ROOM:
            return list(self.rooms)
        if resource_type == ResourceType.EQUIPMENT:
            return list(self.equipment)
        return []

    def contains(self, resource_type: ResourceType, name: str) -> bool:
        return name in self.options(resource_type)
