import os

# アプリのインポート前にテスト用の設定を適用する
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from cinemax.database import Base, SessionLocal, engine
from cinemax.main import app
from cinemax.services.credential_store import CredentialStore

ANA = {
    "username": "anagp",
    "password": "Secret123",
    "nombre": "Ana Gomez",
    "correo": "ana@example.com",
}


@pytest.fixture(autouse=True)
def clean_db():
    """各テストを空の clientes / trabajadores テーブルで開始する"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def store():
    return CredentialStore(SessionLocal)


def register(client, user_type="cliente", **overrides):
    body = dict(ANA, **overrides)
    return client.post(f"/api/auth/register/{user_type}", json=body)


def login(client, username=ANA["username"], password=ANA["password"], user_type="cliente"):
    return client.post(
        "/api/auth/login",
        json={"username": username, "password": password, "userType": user_type},
    )


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
