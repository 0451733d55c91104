"""
Shared fixtures for the planning API tests.

Every test gets its own in-memory SQLite database (StaticPool keeps the one
connection alive), wired into the app through the get_db override, plus a
signed access token factory.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ALGORITHM", "HS256")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from APIs.Core import ALGORITHM, SECRET_KEY, get_db
from Database.session import Base
from main import app
from Models.Admin.Client import Client
from Models.Admin.User import User
from Models.Planning.ProjectType import ProjectCategory, ProjectType

STAFF_ID = "user-staff"
MANAGER_ID = "user-manager"
CLIENT_ID = "client-acme"
CATEGORY_ID = "category-software"
TYPE_ID = "type-website"


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autoflush=False, autocommit=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    session.add_all([
        User(id=STAFF_ID, name="Ana Staff", email="ana@example.com", login="ana"),
        User(id=MANAGER_ID, name="Bruno Manager", email="bruno@example.com", login="bruno"),
        Client(id=CLIENT_ID, name="Acme Ltda", email="contato@acme.example", login="acme"),
        ProjectCategory(id=CATEGORY_ID, code="software", name="Software"),
    ])
    session.flush()
    session.add(ProjectType(id=TYPE_ID, category_id=CATEGORY_ID, code="website", name="Website"))
    session.commit()
    yield session
    session.close()


@pytest.fixture()
def make_token():
    def factory(subject=STAFF_ID, permissions=("*",), kind="user"):
        claims = {"sub": subject, "kind": kind, "permissions": list(permissions)}
        return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)
    return factory


@pytest.fixture()
def client(db, session_factory, make_token):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    test_client.headers.update({"Authorization": f"Bearer {make_token()}"})
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def create_project(client):
    def factory(**overrides):
        payload = {"name": "Portal Acme", "objective": "Novo portal", "projectTypeId": TYPE_ID}
        payload.update(overrides)
        response = client.post("/projects", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return factory
