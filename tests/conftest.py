import os
import tempfile

# Set environment variables BEFORE any imports that might use settings
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_crewtrack.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRES_IN"] = "24h"
os.environ["ENVIRONMENT"] = "development"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@crew.example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"
os.environ["FIRST_ADMIN_NAME"] = "Admin"
for _smtp_var in ("SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASSWORD", "SMTP_FROM_EMAIL"):
    os.environ[_smtp_var] = ""

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.api.deps import get_db, get_token_codec
from app.core.security import TokenClaim, TokenCodec, get_password_hash
from app.db.models.user import User as UserModel
from app.main import app

MEMBER_PASSWORD = "MemberPass123!"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test and run migrations."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the schema and seed the first admin
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        test_engine.dispose()

        for suffix in ["", "-wal", "-shm"]:
            path = f"{test_db_path}{suffix}"
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(temp_db_dir):
            os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def codec() -> TokenCodec:
    return get_token_codec()


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The admin seeded by the first migration."""
    from app.core.config import settings
    from app.repositories.user import get_user_by_email

    user = get_user_by_email(db, settings.first_admin_email)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 001.")

    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "password": settings.first_admin_password,
    }


@pytest.fixture(scope="function")
def admin_token(admin_user: dict, codec: TokenCodec) -> str:
    return codec.encode(TokenClaim(user_id=admin_user["id"], email=admin_user["email"]))


@pytest.fixture(scope="function")
def member_user(db: Session) -> dict:
    """A regular, non-admin crew member."""
    user = UserModel(
        email="member@crew.example.com",
        name="Crew Member",
        password_hash=get_password_hash(MEMBER_PASSWORD),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "password": MEMBER_PASSWORD,
    }


@pytest.fixture(scope="function")
def member_token(member_user: dict, codec: TokenCodec) -> str:
    return codec.encode(TokenClaim(user_id=member_user["id"], email=member_user["email"]))
