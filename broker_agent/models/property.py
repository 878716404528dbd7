"""Property listing models."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class OperationType(str, Enum):
    """Listing operation kind."""

    SALE = "sale"
    RENT = "rent"


class DataSource(str, Enum):
    """Where adapter data came from.

    ``MOCK`` marks the configuration-gap branch: no credential configured,
    local data served instead of calling the provider.
    """

    LIVE = "live"
    MOCK = "mock"


class Property(BaseModel):
    """Canonical property listing.

    Numeric fields always hold a value (0 when the provider omits them).
    """

    id: int
    title: str
    price: float = 0
    currency: str = "USD"
    location: str
    bedrooms: int = 0
    bathrooms: int = 0
    image_url: str
    link: str
    operation: OperationType = OperationType.SALE


class PropertySearchFilter(BaseModel):
    """Search criteria. Every field narrows results, none is required."""

    location: str | None = None
    max_price: float | None = Field(default=None, ge=0)
    min_bedrooms: int | None = Field(default=None, ge=0)
    operation_type: OperationType | None = None

    @field_validator("location")
    @classmethod
    def _blank_location_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    def matches(self, prop: Property) -> bool:
        """Predicate shared by the local dataset and tests."""
        if self.location and self.location.lower() not in prop.location.lower():
            return False
        if self.max_price is not None and prop.price > self.max_price:
            return False
        if self.min_bedrooms is not None and prop.bedrooms < self.min_bedrooms:
            return False
        if self.operation_type is not None and prop.operation != self.operation_type:
            return False
        return True


class PropertySearchResult(BaseModel):
    """Outcome of a property search."""

    properties: list[Property] = Field(default_factory=list)
    source: DataSource = DataSource.LIVE

    @property
    def count(self) -> int:
        return len(self.properties)
