"""
Simulated travel services.

Each tool generates plausible data after a short random delay so the
orchestration loop can be exercised without real provider integrations.
Results are JSON-serializable dicts.
"""

import asyncio
import logging
import random
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Sequence

logger = logging.getLogger(__name__)

AIRLINE_CODES = {
    "Emirates": "EK",
    "Singapore Airlines": "SQ",
    "Qatar Airways": "QR",
    "Lufthansa": "LH",
    "British Airways": "BA",
    "Delta": "DL",
    "United": "UA",
    "JAL": "JL",
    "ANA": "NH",
    "Air France": "AF",
}

HOTEL_CHAINS = [
    "The Ritz-Carlton",
    "Four Seasons",
    "Mandarin Oriental",
    "St. Regis",
    "Park Hyatt",
    "Waldorf Astoria",
    "Aman",
    "Belmond",
    "Rosewood",
    "Peninsula",
]

HOTEL_AREAS = ["Downtown", "City Center", "Waterfront", "Historic District", "Business District"]

WEATHER_CONDITIONS = ["Sunny", "Partly Cloudy", "Cloudy", "Light Rain", "Clear"]

ACTIVITY_TYPES = {
    "culture": [
        "Museum Tour",
        "Historical Walking Tour",
        "Art Gallery Visit",
        "Architecture Tour",
        "Local Market Experience",
    ],
    "adventure": [
        "Helicopter Tour",
        "Zip-lining Experience",
        "Scuba Diving",
        "Mountain Hiking",
        "Paragliding",
    ],
    "food": [
        "Food Tour",
        "Cooking Class",
        "Wine Tasting",
        "Michelin Star Dining",
        "Street Food Adventure",
    ],
    "nature": [
        "National Park Tour",
        "Wildlife Safari",
        "Botanical Garden Visit",
        "Sunset Cruise",
        "Nature Photography Tour",
    ],
}

VISA_FREE = {
    "US": ["Canada", "UK", "France", "Germany", "Japan", "South Korea", "Italy", "Spain", "Australia", "Singapore"],
    "UK": ["US", "Canada", "France", "Germany", "Japan", "Italy", "Spain", "Australia", "Singapore", "UAE"],
}

# Units of each currency per US dollar.
EXCHANGE_RATES = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 149.50,
    "AED": 3.67,
    "SGD": 1.34,
    "AUD": 1.53,
    "CAD": 1.36,
    "CHF": 0.88,
    "INR": 83.12,
    "THB": 35.50,
}

CABIN_BASE_PRICES = {"economy": 450, "business": 2500, "first": 8000}


def _short_id(prefix: str, length: int = 8) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:length].upper()}"


def _random_time() -> str:
    return f"{random.randint(0, 23):02d}:{random.choice(['00', '15', '30', '45'])}"


def _nights_between(check_in: str, check_out: str) -> int:
    delta = date.fromisoformat(check_out) - date.fromisoformat(check_in)
    return max(1, delta.days)


class TravelTools:
    """Handlers for the travel tool set, sharing a simulated latency range."""

    def __init__(self, min_latency_ms: int = 400, max_latency_ms: int = 1000):
        self.min_latency_ms = min_latency_ms
        self.max_latency_ms = max_latency_ms

    async def _simulate_delay(self) -> None:
        delay_ms = random.uniform(self.min_latency_ms, self.max_latency_ms)
        await asyncio.sleep(delay_ms / 1000)

    async def search_flights(
        self,
        origin: str,
        destination: str,
        date: str,
        passengers: int = 1,
        cabin_class: str = "economy",
    ) -> dict:
        """Search for available flights between two cities."""
        await self._simulate_delay()

        base_price = CABIN_BASE_PRICES.get(cabin_class, CABIN_BASE_PRICES["economy"])
        if cabin_class == "economy":
            amenities = ["Wi-Fi", "Entertainment"]
        else:
            amenities = ["Lie-flat seat", "Lounge access", "Priority boarding", "Wi-Fi", "Gourmet dining"]

        flights = []
        for _ in range(3):
            airline = random.choice(list(AIRLINE_CODES))
            depart = _random_time()
            depart_hour, depart_minute = depart.split(":")
            duration_hours = random.randint(2, 15)
            stops = random.randint(1, 2) if random.random() > 0.6 else 0

            flights.append({
                "flight_id": _short_id("FL"),
                "airline": airline,
                "flight_number": f"{AIRLINE_CODES[airline]}{random.randint(100, 999)}",
                "origin": origin,
                "destination": destination,
                "date": date,
                "departure_time": depart,
                "arrival_time": f"{(int(depart_hour) + duration_hours) % 24:02d}:{depart_minute}",
                "duration": f"{duration_hours}h {random.randint(0, 59)}m",
                "stops": "Non-stop" if stops == 0 else f"{stops} stop{'s' if stops > 1 else ''}",
                "cabin_class": cabin_class.capitalize(),
                "price": int(base_price + random.random() * base_price * 0.5) * passengers,
                "currency": "USD",
                "seats_left": random.randint(2, 9),
                "amenities": amenities,
            })

        return {
            "success": True,
            "search_id": _short_id("SRCH"),
            "route": f"{origin} → {destination}",
            "date": date,
            "passengers": passengers,
            "cabin_class": cabin_class,
            "results_count": len(flights),
            "flights": sorted(flights, key=lambda f: f["price"]),
        }

    async def search_hotels(
        self,
        city: str,
        check_in: str,
        check_out: str,
        guests: int = 2,
        star_rating: int = 4,
    ) -> dict:
        """Search for available hotels in a city."""
        await self._simulate_delay()

        nights = _nights_between(check_in, check_out)
        hotels = []
        for _ in range(3):
            chain = random.choice(HOTEL_CHAINS)
            stars = max(star_rating, min(5, star_rating + random.randint(0, 1)))
            price_per_night = 150 + stars * 80 + random.randint(0, 199)

            hotels.append({
                "hotel_id": _short_id("HTL"),
                "name": f"{chain} {city}",
                "chain": chain,
                "stars": stars,
                "location": f"{random.choice(HOTEL_AREAS)}, {city}",
                "check_in": check_in,
                "check_out": check_out,
                "nights": nights,
                "price_per_night": price_per_night,
                "total_price": price_per_night * nights,
                "currency": "USD",
                "rating": f"{4.2 + random.random() * 0.7:.1f}",
                "reviews_count": random.randint(500, 2499),
                "amenities": ["Free Wi-Fi", "Pool", "Spa", "Fitness Center", "Restaurant", "Room Service", "Concierge"],
                "room_type": "Suite" if guests > 2 else "Deluxe Room",
                "cancellation": "Free cancellation until 24h before check-in",
            })

        return {
            "success": True,
            "search_id": _short_id("SRCH"),
            "city": city,
            "check_in": check_in,
            "check_out": check_out,
            "guests": guests,
            "nights": nights,
            "results_count": len(hotels),
            "hotels": sorted(hotels, key=lambda h: h["total_price"]),
        }

    async def get_weather_forecast(self, city: str, start_date: str, end_date: str) -> dict:
        """Get a daily forecast (at most seven days) for a destination."""
        await self._simulate_delay()

        start = date.fromisoformat(start_date)
        end = date.fromisoformat(end_date)
        days = max(1, min(7, (end - start).days + 1))

        forecast = []
        for offset in range(days):
            temp_high = 68 + random.randint(0, 24)
            forecast.append({
                "date": (start + timedelta(days=offset)).isoformat(),
                "condition": random.choice(WEATHER_CONDITIONS),
                "temp_high_f": temp_high,
                "temp_low_f": temp_high - 10 - random.randint(0, 9),
                "temp_high_c": round((temp_high - 32) * 5 / 9),
                "temp_low_c": round((temp_high - 15 - 32) * 5 / 9),
                "humidity": random.randint(40, 79),
                "uv_index": random.randint(3, 9),
                "precipitation_chance": random.randint(0, 39),
            })

        avg_temp = round(sum(day["temp_high_f"] for day in forecast) / len(forecast))
        if avg_temp > 75:
            packing = (
                "Pack light, breathable clothing. Sunscreen and sunglasses essential. "
                "Consider a hat for sun protection."
            )
            activities = ["Beach", "Water sports", "Outdoor dining"]
        elif avg_temp > 60:
            packing = "Pack layers for variable temperatures. Light jacket recommended for evenings."
            activities = ["Museums", "City tours", "Local cuisine"]
        else:
            packing = "Pack warm layers and a good jacket. Consider waterproof footwear."
            activities = ["Museums", "City tours", "Local cuisine"]

        return {
            "success": True,
            "city": city,
            "period": f"{start_date} to {end_date}",
            "forecast": forecast,
            "packing_recommendation": packing,
            "best_activities": activities,
        }

    async def search_activities(
        self,
        city: str,
        date: str,
        category: str = "culture",
        budget: float = 200,
    ) -> dict:
        """Search for activities and experiences in a destination."""
        await self._simulate_delay()

        types = ACTIVITY_TYPES.get(category, ACTIVITY_TYPES["culture"])
        activities = []
        for _ in range(3):
            activity = random.choice(types)
            activities.append({
                "activity_id": _short_id("ACT"),
                "name": f"{activity} in {city}",
                "category": category,
                "date": date,
                "duration": f"{random.randint(2, 5)} hours",
                "price": int(30 + random.random() * min(budget, 250)),
                "currency": "USD",
                "rating": f"{4.3 + random.random() * 0.6:.1f}",
                "reviews_count": random.randint(100, 599),
                "highlights": [
                    "Expert local guide",
                    "Small group (max 12)",
                    "Hotel pickup included",
                    "Tastings included" if category == "food" else "Skip-the-line access",
                ],
                "meeting_point": f"{city} City Center",
                "languages": ["English", "Spanish", "French"],
                "cancellation": "Free cancellation up to 24h before",
            })

        return {
            "success": True,
            "search_id": _short_id("SRCH"),
            "city": city,
            "date": date,
            "category": category,
            "results_count": len(activities),
            "activities": sorted(activities, key=lambda a: float(a["rating"]), reverse=True),
        }

    async def create_itinerary(
        self,
        traveler_name: str,
        destination: str,
        flight_ids: Sequence[str] = (),
        hotel_ids: Sequence[str] = (),
        activity_ids: Sequence[str] = (),
    ) -> dict:
        """Create a confirmed itinerary from previously selected components."""
        await self._simulate_delay()

        return {
            "success": True,
            "itinerary_id": _short_id("ITN", 6),
            "pnr": uuid.uuid4().hex[:6].upper(),
            "traveler_name": traveler_name,
            "destination": destination,
            "status": "CONFIRMED",
            "created_at": datetime.now(timezone.utc).isoformat(),
            "components": {
                "flights": len(flight_ids),
                "hotels": len(hotel_ids),
                "activities": len(activity_ids),
            },
            "total_cost": 2500 + random.randint(0, 2999),
            "currency": "USD",
            "payment_status": "PENDING",
            "confirmation_email": "Sent to registered email",
            "next_steps": [
                "Complete payment within 24 hours",
                "Download your travel documents",
                "Check visa requirements",
                "Add travel insurance (recommended)",
            ],
            "support": {
                "phone": "+1-800-VOYAGER",
                "email": "support@voyager-ai.com",
                "live_chat": "Available 24/7",
            },
        }

    async def get_visa_requirements(self, destination_country: str, passport_country: str) -> dict:
        """Get visa requirements for a passport holder visiting a country."""
        await self._simulate_delay()

        if destination_country in VISA_FREE.get(passport_country, []):
            return {
                "success": True,
                "destination_country": destination_country,
                "passport_country": passport_country,
                "visa_required": False,
                "visa_type": "Visa-free entry",
                "max_stay": "90 days",
                "processing_time": "N/A",
                "fee": 0,
                "currency": "USD",
                "required_documents": [
                    "Valid passport (6+ months validity)",
                    "Return/onward ticket",
                    "Proof of accommodation",
                    "Proof of sufficient funds",
                ],
                "notes": (
                    f"{passport_country} passport holders can enter {destination_country} "
                    "visa-free for tourism purposes."
                ),
                "entry_requirements": [
                    "Complete arrival card",
                    "May need to show proof of funds",
                    "COVID-19 requirements may apply - check latest updates",
                ],
            }

        return {
            "success": True,
            "destination_country": destination_country,
            "passport_country": passport_country,
            "visa_required": True,
            "visa_type": "Tourist Visa / eVisa",
            "max_stay": "30-90 days",
            "processing_time": "3-15 business days",
            "fee": 40 + random.randint(0, 119),
            "currency": "USD",
            "required_documents": [
                "Valid passport (6+ months validity)",
                "Completed visa application form",
                "Passport-sized photos (2)",
                "Proof of accommodation",
                "Return ticket",
                "Bank statements (last 3 months)",
                "Travel insurance",
            ],
            "notes": (
                f"Apply online or at the {destination_country} embassy/consulate. "
                "eVisa available for most nationalities."
            ),
            "application_links": [
                f"https://visa.{destination_country.lower().replace(' ', '')}.gov/apply",
            ],
        }

    async def currency_exchange(self, from_currency: str, to_currency: str, amount: float) -> dict:
        """Convert an amount between currencies using the fixed rate table."""
        await self._simulate_delay()

        # Unknown codes are treated as USD.
        rate = EXCHANGE_RATES.get(to_currency, 1.0) / EXCHANGE_RATES.get(from_currency, 1.0)

        if amount > 1000:
            tip = (
                "For amounts over $1000, consider using a travel debit card for better rates. "
                "Avoid airport currency exchanges."
            )
        else:
            tip = (
                "Use your credit card for purchases abroad - most offer competitive exchange "
                "rates with no foreign transaction fees."
            )

        return {
            "success": True,
            "from_currency": from_currency,
            "to_currency": to_currency,
            "amount": amount,
            "rate": f"{rate:.4f}",
            "converted_amount": round(amount * rate, 2),
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "provider": "Voyager Exchange",
            "fee": "0% commission",
            "money_saving_tip": tip,
            "rate_trend": random.choice(
                ["Rate has improved 1.2% this week", "Rate is stable this week"]
            ),
        }
