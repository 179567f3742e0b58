"""
Robot (entity) data model.
"""
from datetime import date
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from engine.validation import coerce_numeric, coerce_date

# Numeric column as stored in the robots table; malformed values become None
OptionalNumber = Annotated[Optional[int | float], BeforeValidator(coerce_numeric)]


class Robot(BaseModel):
    """
    A humanoid robot as read from the robots table.

    Every comparable attribute is optional. A missing value stays None and is
    never treated as zero. Embedded relations (manufacturer, specifications,
    media) are kept as extra fields and passed back to clients untouched.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    slug: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    manufacturer_id: Optional[str] = None

    height_cm: OptionalNumber = None
    weight_kg: OptionalNumber = None
    estimated_price_usd: OptionalNumber = None
    rating_average: OptionalNumber = Field(default=None, description="Average user rating, 0-5")
    walking_speed_kmh: OptionalNumber = None
    max_payload_kg: OptionalNumber = None
    battery_life_hours: OptionalNumber = None
    release_date: Annotated[Optional[date], BeforeValidator(coerce_date)] = None

    is_featured: Optional[bool] = False
    is_verified: Optional[bool] = False

    @field_validator("id", "manufacturer_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v):
        """Numeric primary keys are compared as strings."""
        return str(v) if v is not None else None

    @property
    def release_year(self) -> Optional[int]:
        """Year component of release_date, used as a comparable attribute."""
        if self.release_date is None:
            return None
        return self.release_date.year
