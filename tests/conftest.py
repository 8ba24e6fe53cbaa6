import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 앱 임포트 전에 테스트 환경 고정
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-0123456789"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_PER_MIN"] = "0"
os.environ["JWT_ACCESS_EXPIRATION"] = "15m"
os.environ["JWT_REFRESH_EXPIRATION"] = "7d"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from todo_api.core.cache import get_cache  # noqa: E402
from todo_api.core.config import get_settings  # noqa: E402
from todo_api.core.security import PasswordHasher  # noqa: E402
from todo_api.core.tokens import get_token_issuer  # noqa: E402
from todo_api.db.session import create_all_tables, engine  # noqa: E402
from todo_api.services.auth_service import AuthService  # noqa: E402
from todo_api.services.user_store import UserStore  # noqa: E402

API = "/api"
PASSWORD = "pw123456"


@pytest.fixture(autouse=True)
def _fresh_state():
    create_all_tables()
    get_cache().clear()
    yield
    SQLModel.metadata.drop_all(engine)
    get_cache().clear()


@pytest.fixture
def db():
    with Session(engine) as s:
        yield s


@pytest.fixture
def cache():
    return get_cache()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def auth_service(db, hasher, cache):
    return AuthService(UserStore(db), hasher, get_token_issuer(), cache, get_settings())


@pytest.fixture
def make_user(db, hasher):
    def _make(email="a@x.com", password=PASSWORD, **extra):
        return UserStore(db).create(email=email, password_hash=hasher.hash(password), **extra)

    return _make


@pytest.fixture
def client():
    from todo_api.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(email="a@x.com", password=PASSWORD, **extra):
        body = {"email": email, "password": password, **extra}
        res = client.post(f"{API}/users", json=body)
        assert res.status_code == 201, res.text
        return res.json()

    return _register


@pytest.fixture
def login(client):
    def _login(email="a@x.com", password=PASSWORD):
        res = client.post(f"{API}/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return res.json()

    return _login


@pytest.fixture
def auth_headers(register, login):
    def _headers(email="a@x.com", password=PASSWORD):
        register(email=email, password=password)
        tokens = login(email=email, password=password)
        return {"Authorization": f"Bearer {tokens['accessToken']}"}

    return _headers
