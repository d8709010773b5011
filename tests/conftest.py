# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.domain import GlobalRole
from infra.db.base import Base
import infra.db.models  # noqa
from infra.services import build_service_graph


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def services(session):
    return build_service_graph(session).as_dict()


@pytest.fixture
def admin(services):
    return services["user_service"].list_managers()[0]


@pytest.fixture
def login(services):
    def _login(user) -> None:
        services["user_session"].set_principal(services["user_service"].build_principal(user))

    return _login


@pytest.fixture
def make_user(services, admin):
    counter = {"n": 0}

    def _make(name: str, role: GlobalRole = GlobalRole.EMPLOYEE):
        counter["n"] += 1
        email = f"{name.lower().replace(' ', '.')}{counter['n']}@example.com"
        manager_id = admin.id if role == GlobalRole.EMPLOYEE else None
        return services["user_service"].register_user(name, email, role, manager_id)

    return _make
