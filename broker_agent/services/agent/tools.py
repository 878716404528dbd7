"""Tools the agent exposes to the model.

Each tool has a name, a description, a JSON schema the model sees, and a
pydantic model its arguments are validated against before dispatch. The set
is closed: names outside ``TOOL_REGISTRY`` are rejected.
"""

import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from broker_agent.models import OperationType, PropertySearchFilter

SEARCH_PROPERTIES = "search_properties"
SEND_SCHEDULING_LINK = "send_scheduling_link"

_OPERATION_SYNONYMS = {
    "buy": "sale",
    "purchase": "sale",
    "venta": "sale",
    "compra": "sale",
    "rental": "rent",
    "alquiler": "rent",
}


class SearchPropertiesArgs(BaseModel):
    """Arguments of ``search_properties``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location: str | None = None
    max_price: float | None = Field(default=None, alias="maxPrice", ge=0)
    min_bedrooms: int | None = Field(default=None, alias="minBedrooms", ge=0)
    operation_type: OperationType = Field(alias="operationType")

    @field_validator("operation_type", mode="before")
    @classmethod
    def _normalize_operation(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return _OPERATION_SYNONYMS.get(value, value)
        return value

    def to_filter(self) -> PropertySearchFilter:
        return PropertySearchFilter(
            location=self.location,
            max_price=self.max_price,
            min_bedrooms=self.min_bedrooms,
            operation_type=self.operation_type,
        )


class SchedulingLinkArgs(BaseModel):
    """Arguments of ``send_scheduling_link``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    property_id: int = Field(alias="propertyId")


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool."""

    name: str
    description: str
    parameters: dict[str, Any]
    args_model: type[BaseModel]

    def to_schema(self) -> dict[str, Any]:
        """OpenAI function-calling format (what LiteLLM expects)."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def parse_arguments(self, arguments: dict[str, Any]) -> BaseModel:
        """Validate raw model arguments.

        Raises:
            pydantic.ValidationError: Arguments do not match the schema
        """
        return self.args_model.model_validate(arguments)


TOOL_REGISTRY: dict[str, ToolSpec] = {
    SEARCH_PROPERTIES: ToolSpec(
        name=SEARCH_PROPERTIES,
        description=(
            "Search for properties in the real estate database based on user criteria. "
            "Returns a list of property objects."
        ),
        parameters={
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "The neighborhood or city (e.g. Palermo, Recoleta).",
                },
                "maxPrice": {
                    "type": "number",
                    "description": "The maximum budget of the user in USD.",
                },
                "minBedrooms": {
                    "type": "number",
                    "description": "Minimum number of bedrooms required.",
                },
                "operationType": {
                    "type": "string",
                    "enum": [OperationType.RENT.value, OperationType.SALE.value],
                    "description": 'Either "rent" or "sale".',
                },
            },
            "required": ["operationType"],
        },
        args_model=SearchPropertiesArgs,
    ),
    SEND_SCHEDULING_LINK: ToolSpec(
        name=SEND_SCHEDULING_LINK,
        description=(
            "Generates a calendar link for the user to book a visit for a specific property."
        ),
        parameters={
            "type": "object",
            "properties": {
                "propertyId": {
                    "type": "number",
                    "description": "The ID of the property they want to visit.",
                },
            },
            "required": ["propertyId"],
        },
        args_model=SchedulingLinkArgs,
    ),
}


def tool_schemas() -> list[dict[str, Any]]:
    """Schemas for every registered tool, in registration order."""
    return [spec.to_schema() for spec in TOOL_REGISTRY.values()]


def get_tool(name: str) -> ToolSpec | None:
    return TOOL_REGISTRY.get(name)


def build_scheduling_link(base_url: str, tenant_name: str, property_id: int) -> str:
    """Derive the booking URL for a property. No external call."""
    slug = re.sub(r"\s+", "", tenant_name).lower()
    return f"{base_url.rstrip('/')}/{slug}/visit-property-{property_id}"
