#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v

Database Setup:
    Tests run against a private in-memory SQLite database created per test
    with create_test_repo(); no external service is required.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.utils import generate_id
from database.init_db import init_db
from database.models import UserRole, OfferingType
from database.repository import MarketplaceRepository


def create_test_engine():
    """In-memory SQLite shared by every connection of this engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


def create_test_repo() -> MarketplaceRepository:
    """Fresh database and a MarketplaceRepository bound to one session."""
    session = sessionmaker(bind=create_test_engine(), autoflush=False)()
    return MarketplaceRepository(session)


def make_user(repo, name="Ana", role=UserRole.REQUESTER.value, email=None):
    email = email or f"{generate_id(role)}@example.com"
    user = repo.users.create(name=name, email=email, role=role)
    repo.commit()
    return user


def make_requester(repo, user_id=None, **fields):
    if user_id is None:
        user_id = make_user(repo, name="Requester").id
    defaults = dict(
        company_name="Tienda La Esquina",
        industry="retail",
        size="small",
        location="Ciudad de México",
        needs=["Marketing digital"],
        service_types=["marketing"],
        budget_min=800.0,
        budget_max=1500.0,
    )
    defaults.update(fields)
    profile = repo.requesters.create(user_id=user_id, **defaults)
    repo.commit()
    return profile


def make_provider(repo, user_id=None, **fields):
    if user_id is None:
        user_id = make_user(repo, name="Provider", role=UserRole.PROVIDER.value).id
    defaults = dict(
        company_name="Agencia Digital",
        location="Ciudad de México",
        services=["Marketing digital", "SEO"],
        capabilities=["Redes sociales"],
        pricing=[{"service": "Marketing digital", "min_price": 1000, "max_price": 1200, "unit": "mes"}],
        rating=4.0,
        review_count=0,
    )
    defaults.update(fields)
    profile = repo.providers.create(user_id=user_id, **defaults)
    repo.commit()
    return profile


def make_offering(repo, provider, **fields):
    defaults = dict(
        offering_type=OfferingType.SERVICE.value,
        name="Campaña en redes sociales",
        description="Gestión mensual de redes sociales",
        category="Marketing digital",
        min_price=1000.0,
        max_price=1200.0,
        features=["Marketing digital"],
        requirements=[],
        specifications=[],
        tags=["redes"],
        availability_location="Ciudad de México",
        is_available=True,
    )
    defaults.update(fields)
    offering = repo.offerings.create(provider_id=provider.id, **defaults)
    repo.commit()
    return offering
