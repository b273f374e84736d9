"""
Seed script -- populates the database with sample bookings for reviewers.

Run after migrations:
    python seed.py

Creates, through the normal order lifecycle (mail is never sent):
  - 2 pending bookings
  - 2 confirmed bookings, one of them picked up tomorrow
  - 1 booking with a counter-offered price
  - 1 rejected booking

Prints the customer and operator links for each one.
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import func, select

from airport_taxi.config import settings
from airport_taxi.domain.lifecycle import OrderLifecycle
from airport_taxi.domain.tokens import TokenAuthority
from airport_taxi.infrastructure.database import async_session_factory, engine
from airport_taxi.infrastructure.models import OrderModel
from airport_taxi.infrastructure.repositories import OrderRepository
from airport_taxi.notifications.email import LoggingNotifier
from airport_taxi.notifications.links import LinkBuilder
from airport_taxi.notifications.translations import default_rejection_reason

TODAY = date.today()

BOOKINGS = [
    {
        "full_name": "Anna Kowalska",
        "email_address": "anna@example.com",
        "phone_number": "+48 600 100 200",
        "pickup_address": "Gdańsk Lech Wałęsa Airport",
        "flight_number": "LO3821",
        "days_ahead": 3,
        "pickup_time": "08:30",
        "locale": "pl",
        "then": None,
    },
    {
        "full_name": "John Smith",
        "email_address": "john@example.com",
        "phone_number": "+44 7700 900123",
        "pickup_address": "Hotel Hilton, Targ Rybny 1, Gdańsk",
        "flight_number": "FR1234",
        "days_ahead": 5,
        "pickup_time": "14:00",
        "locale": "en",
        "then": None,
    },
    {
        "full_name": "Lena Müller",
        "email_address": "lena@example.com",
        "phone_number": "0049 151 2345678",
        "pickup_address": "Gdańsk Lech Wałęsa Airport",
        "flight_number": "LH1366",
        "days_ahead": 1,
        "pickup_time": "10:15",
        "locale": "de",
        "then": "confirm",
    },
    {
        "full_name": "Erik Larsson",
        "email_address": "erik@example.com",
        "phone_number": "+46 70 123 45 67",
        "pickup_address": "Sopot, Monte Cassino 10",
        "flight_number": "SK757",
        "days_ahead": 7,
        "pickup_time": "18:45",
        "locale": "sv",
        "then": "confirm",
    },
    {
        "full_name": "Mikko Virtanen",
        "email_address": "mikko@example.com",
        "phone_number": "+358 40 1234567",
        "pickup_address": "Gdynia, Świętojańska 50",
        "flight_number": "AY1141",
        "days_ahead": 10,
        "pickup_time": "06:00",
        "locale": "fi",
        "then": "price",
    },
    {
        "full_name": "Ole Hansen",
        "email_address": "ole@example.com",
        "phone_number": "+45 20 12 34 56",
        "pickup_address": "Gdańsk Lech Wałęsa Airport",
        "flight_number": "DY3012",
        "days_ahead": 2,
        "pickup_time": "23:50",
        "locale": "da",
        "then": "reject",
    },
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(OrderModel))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        lifecycle = OrderLifecycle(
            OrderRepository(session),
            LoggingNotifier(),
            TokenAuthority(settings.admin_panel_token),
            default_rejection_reason=default_rejection_reason,
        )
        links = LinkBuilder(settings)

        for booking in BOOKINGS:
            created = await lifecycle.create(
                {
                    "car_type": 2,
                    "pickup_address": booking["pickup_address"],
                    "proposed_price": "150",
                    "date": (TODAY + timedelta(days=booking["days_ahead"])).isoformat(),
                    "pickup_time": booking["pickup_time"],
                    "flight_number": booking["flight_number"],
                    "full_name": booking["full_name"],
                    "email_address": booking["email_address"],
                    "phone_number": booking["phone_number"],
                    "additional_notes": '{"passengers": 2, "pickupType": "airport"}',
                },
                booking["locale"],
            )
            order = created.order
            token = order.confirmation_token

            if booking["then"] == "confirm":
                order = (await lifecycle.confirm(order.id, token)).order
            elif booking["then"] == "price":
                order = (await lifecycle.propose_price(order.id, token, "220")).order
            elif booking["then"] == "reject":
                order = (await lifecycle.reject(order.id, token)).order

            print(f"  #{order.generated_id} {order.status.value:<15} {order.content.full_name}")
            print(f"      customer: {links.customer_manage(order)}")
            print(f"      operator: {links.admin_manage(order, token=token)}")

        print(f"\nSeed complete! Created {len(BOOKINGS)} bookings")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
