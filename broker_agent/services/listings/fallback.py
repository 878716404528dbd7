"""Local property dataset served when no listings API key is configured."""

from broker_agent.models import OperationType, Property, PropertySearchFilter

FALLBACK_PROPERTIES: tuple[Property, ...] = (
    Property(
        id=101,
        title="Modern Loft in Palermo Soho",
        price=950,
        currency="USD",
        location="Palermo",
        bedrooms=1,
        bathrooms=1,
        image_url="https://picsum.photos/400/300?random=1",
        link="https://tokkobroker.com/p/101",
        operation=OperationType.RENT,
    ),
    Property(
        id=102,
        title="Classic Family Home Recoleta",
        price=450000,
        currency="USD",
        location="Recoleta",
        bedrooms=3,
        bathrooms=2,
        image_url="https://picsum.photos/400/300?random=2",
        link="https://tokkobroker.com/p/102",
        operation=OperationType.SALE,
    ),
    Property(
        id=103,
        title="Sunny Apartment Belgrano",
        price=900,
        currency="USD",
        location="Belgrano",
        bedrooms=2,
        bathrooms=1,
        image_url="https://picsum.photos/400/300?random=3",
        link="https://tokkobroker.com/p/103",
        operation=OperationType.RENT,
    ),
    Property(
        id=104,
        title="Luxury Penthouse Puerto Madero",
        price=850000,
        currency="USD",
        location="Puerto Madero",
        bedrooms=4,
        bathrooms=4,
        image_url="https://picsum.photos/400/300?random=4",
        link="https://tokkobroker.com/p/104",
        operation=OperationType.SALE,
    ),
    Property(
        id=105,
        title="Cozy Studio San Telmo",
        price=600,
        currency="USD",
        location="San Telmo",
        bedrooms=0,
        bathrooms=1,
        image_url="https://picsum.photos/400/300?random=5",
        link="https://tokkobroker.com/p/105",
        operation=OperationType.RENT,
    ),
)

MAX_FALLBACK_RESULTS = 5


def search_fallback(search_filter: PropertySearchFilter) -> list[Property]:
    """Filter the local dataset with the same predicate as the live path."""
    matches = [p for p in FALLBACK_PROPERTIES if search_filter.matches(p)]
    return [p.model_copy() for p in matches[:MAX_FALLBACK_RESULTS]]
