"""
Voyager Tools Package

Available tools:
- search_flights: Flight search
- search_hotels: Hotel search
- get_weather_forecast: Destination weather
- search_activities: Activities and experiences
- create_itinerary: Itinerary booking confirmation
- get_visa_requirements: Visa rules by passport
- currency_exchange: Currency conversion
"""

from typing import Optional

from .registry import ToolDefinition, ToolRegistry
from .travel import TravelTools

_DATE = "in YYYY-MM-DD format"

TOOL_SCHEMAS: dict[str, tuple[str, dict]] = {
    "search_flights": (
        "Search for available flights between two cities. "
        "Returns flight options with prices, times, and availability.",
        {
            "type": "object",
            "properties": {
                "origin": {"type": "string", "description": 'Origin airport code or city (e.g., "NYC", "JFK", "New York")'},
                "destination": {"type": "string", "description": 'Destination airport code or city (e.g., "DXB", "Dubai")'},
                "date": {"type": "string", "description": f"Departure date {_DATE}"},
                "passengers": {"type": "number", "description": "Number of passengers (default: 1)"},
                "cabin_class": {"type": "string", "enum": ["economy", "business", "first"], "description": "Cabin class preference"},
            },
            "required": ["origin", "destination", "date"],
        },
    ),
    "search_hotels": (
        "Search for available hotels in a city. "
        "Returns hotel options with prices, ratings, and amenities.",
        {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "City name to search hotels in"},
                "check_in": {"type": "string", "description": f"Check-in date {_DATE}"},
                "check_out": {"type": "string", "description": f"Check-out date {_DATE}"},
                "guests": {"type": "number", "description": "Number of guests (default: 2)"},
                "star_rating": {"type": "number", "description": "Minimum star rating (1-5)"},
            },
            "required": ["city", "check_in", "check_out"],
        },
    ),
    "get_weather_forecast": (
        "Get weather forecast for a destination city. Helps plan activities and packing.",
        {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "City name for weather forecast"},
                "start_date": {"type": "string", "description": f"Start date {_DATE}"},
                "end_date": {"type": "string", "description": f"End date {_DATE}"},
            },
            "required": ["city", "start_date", "end_date"],
        },
    ),
    "search_activities": (
        "Search for activities and experiences in a destination. "
        "Categories: culture, adventure, food, nature.",
        {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "City to search activities in"},
                "date": {"type": "string", "description": f"Date for the activity {_DATE}"},
                "category": {"type": "string", "enum": ["culture", "adventure", "food", "nature"], "description": "Activity category"},
                "budget": {"type": "number", "description": "Maximum budget per person in USD"},
            },
            "required": ["city", "date"],
        },
    ),
    "create_itinerary": (
        "Create a complete travel itinerary with flights, hotels, and activities. "
        "Returns booking confirmation.",
        {
            "type": "object",
            "properties": {
                "traveler_name": {"type": "string", "description": "Name of the primary traveler"},
                "destination": {"type": "string", "description": "Trip destination"},
                "flight_ids": {"type": "array", "items": {"type": "string"}, "description": "Array of selected flight IDs"},
                "hotel_ids": {"type": "array", "items": {"type": "string"}, "description": "Array of selected hotel IDs"},
                "activity_ids": {"type": "array", "items": {"type": "string"}, "description": "Array of selected activity IDs"},
            },
            "required": ["traveler_name", "destination"],
        },
    ),
    "get_visa_requirements": (
        "Get visa requirements for traveling to a country. "
        "Includes required documents and processing info.",
        {
            "type": "object",
            "properties": {
                "destination_country": {"type": "string", "description": "Country you are traveling to"},
                "passport_country": {"type": "string", "description": 'Country that issued your passport (e.g., "US", "UK")'},
            },
            "required": ["destination_country", "passport_country"],
        },
    ),
    "currency_exchange": (
        "Get currency exchange rates and convert amounts. Includes money-saving tips.",
        {
            "type": "object",
            "properties": {
                "from_currency": {"type": "string", "description": 'Source currency code (e.g., "USD")'},
                "to_currency": {"type": "string", "description": 'Target currency code (e.g., "EUR")'},
                "amount": {"type": "number", "description": "Amount to convert"},
            },
            "required": ["from_currency", "to_currency", "amount"],
        },
    ),
}


def build_default_registry(
    min_latency_ms: Optional[int] = None,
    max_latency_ms: Optional[int] = None,
    validate_arguments: Optional[bool] = None,
) -> ToolRegistry:
    """
    Build and seal a registry holding the travel tool set.

    Unspecified arguments fall back to the ``tools`` configuration section.
    """
    from ..config import config

    tools = TravelTools(
        min_latency_ms=config.tools.min_latency_ms if min_latency_ms is None else min_latency_ms,
        max_latency_ms=config.tools.max_latency_ms if max_latency_ms is None else max_latency_ms,
    )
    registry = ToolRegistry(
        validate_arguments=(
            config.tools.validate_arguments if validate_arguments is None else validate_arguments
        )
    )
    for name, (description, parameters) in TOOL_SCHEMAS.items():
        registry.register(
            ToolDefinition(
                name=name,
                description=description,
                parameters=parameters,
                handler=getattr(tools, name),
            )
        )
    registry.seal()
    return registry


__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "TravelTools",
    "TOOL_SCHEMAS",
    "build_default_registry",
]
