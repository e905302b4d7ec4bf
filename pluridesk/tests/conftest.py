"""
Test fixtures - in-memory SQLite database + HTTP client scoped to the test owner
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from pluridesk.config import get_settings
from pluridesk.database import Base, get_db
from pluridesk.main import app
from pluridesk.models.client import Client
from pluridesk.models.job import Job
from pluridesk.models.supplier import Supplier

OWNER_ID = get_settings().OWNER_ID
OTHER_OWNER_ID = "99999999-0000-0000-0000-000000000099"


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline test data: two clients, a supplier, and a client owned by someone else.

    Only ids are returned so tests never read ORM rows a rollback has expired.
    """
    usd_client = Client(owner_id=OWNER_ID, name="Acme Localization", default_currency="USD")
    eur_client = Client(owner_id=OWNER_ID, name="Maison Dupont", default_currency="EUR")
    supplier = Supplier(owner_id=OWNER_ID, name="Freelance Translator")
    foreign_client = Client(owner_id=OTHER_OWNER_ID, name="Someone Else Ltd")
    foreign_supplier = Supplier(owner_id=OTHER_OWNER_ID, name="Other Agency")

    db_session.add_all([usd_client, eur_client, supplier, foreign_client, foreign_supplier])
    await db_session.commit()

    return {
        "usd_client": usd_client.id,
        "eur_client": eur_client.id,
        "supplier": supplier.id,
        "foreign_client": foreign_client.id,
        "foreign_supplier": foreign_supplier.id,
        "other_owner": OTHER_OWNER_ID,
    }


@pytest_asyncio.fixture()
async def make_job(db_session):
    """Factory inserting a job row directly; returns its id"""

    async def _make(client_id, total=100.0, currency="USD", owner_id=OWNER_ID, **fields):
        job = Job(
            owner_id=owner_id,
            client_id=client_id,
            title=fields.pop("title", "Website translation"),
            job_code=fields.pop("job_code", None),
            pricing_type=fields.pop("pricing_type", "flat_fee"),
            quantity=fields.pop("quantity", 1),
            rate=fields.pop("rate", total),
            currency=currency,
            total_amount=total,
            status=fields.pop("status", "finished"),
            **fields,
        )
        db_session.add(job)
        await db_session.commit()
        return job.id

    return _make


@pytest_asyncio.fixture()
async def client(db_session, seed_data):
    """httpx AsyncClient bound to the FastAPI app"""

    async def override_get_db():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
