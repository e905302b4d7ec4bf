"""
Database setup script - creates tables and a starter client/supplier for the
configured owner, since neither has an API of its own
"""
import asyncio

from sqlalchemy import select

from pluridesk.config import get_settings
from pluridesk.database import engine, Base, AsyncSessionLocal
from pluridesk.models.client import Client
from pluridesk.models.supplier import Supplier


async def setup_database():
    """Create tables and seed initial data"""
    settings = get_settings()

    print("Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables created")

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Client).where(Client.owner_id == settings.OWNER_ID))
        if result.scalars().first():
            print("Owner already has clients, skipping seed")
            return

        session.add_all([
            Client(owner_id=settings.OWNER_ID, name="Acme Localization", email="billing@acme.example",
                   default_currency="USD"),
            Client(owner_id=settings.OWNER_ID, name="Maison Dupont", email="compta@dupont.example",
                   default_currency="EUR"),
            Supplier(owner_id=settings.OWNER_ID, name="Freelance Translator", email="translator@example.com"),
        ])
        await session.commit()
        print("Seed data created")

    print(f"\nDatabase setup complete for owner {settings.OWNER_ID}")


if __name__ == "__main__":
    asyncio.run(setup_database())
