"""Shared fixtures: an in-memory database per test and an API client bound to it."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from contractflow.core.database import create_db_engine, drop_all_tables, get_db, init_db
from contractflow.main import create_app
from contractflow.services.blueprint_service import BlueprintService
from contractflow.services.contract_service import ContractService


@pytest.fixture()
def engine():
    db_engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=db_engine)
    try:
        yield db_engine
    finally:
        drop_all_tables(bind=db_engine)
        db_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def blueprints(db) -> BlueprintService:
    return BlueprintService(db)


@pytest.fixture()
def contracts(db) -> ContractService:
    return ContractService(db)


@pytest.fixture()
def app(session_factory):
    application = create_app(init_database=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def employment_blueprint(blueprints):
    return blueprints.create(
        name="Employment Contract",
        description="Standard agreement",
        fields=[
            {"field_type": "text", "label": "Name"},
            {"field_type": "checkbox", "label": "Signed?"},
        ],
    )
