import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from datenova.core.security import create_access_token, get_password_hash
from datenova.db.gateway import DataGateway
from datenova.db.session import build_engine, get_db, init_db
from datenova.main import app
from datenova.models import AuthAccount, Company, Project, Task, User, UserRole
from datenova.services.realtime import ChangeFeed
from datenova.storage.local_provider import LocalStorageProvider, get_storage

PASSWORD = "secret-password"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def gateway(session, feed):
    return DataGateway(session, feed=feed)


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(base_dir=str(tmp_path / "storage"), public_base_url="http://testserver")


@pytest.fixture
def client(session, storage):
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_account(session, email, password=PASSWORD) -> AuthAccount:
    account = AuthAccount(email=email, password=get_password_hash(password))
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


@pytest.fixture
def make_user(session):
    """Factory for an activated member (account + profile)."""
    counter = itertools.count(1)

    def _make(rol=UserRole.DEVELOPER.value, **fields) -> User:
        n = next(counter)
        email = fields.pop("email", f"{rol}{n}@datenova.test")
        account = create_account(session, email)
        user = User(id=account.id, email=email, nombre=fields.pop("nombre", f"{rol.title()} {n}"), rol=rol, **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(email)}"}


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.SUPER_ADMIN.value, nombre="Ana Admin")


@pytest.fixture
def developer(make_user):
    return make_user(UserRole.DEVELOPER.value, nombre="Diego Dev", tarifa_hora=20, billable_rate=50)


@pytest.fixture
def client_user(make_user, company):
    return make_user(UserRole.CLIENT.value, nombre="Clara Cliente", empresa_id=company.id)


@pytest.fixture
def company(session):
    company = Company(nombre="Acme S.A.", email="contacto@acme.test")
    session.add(company)
    session.commit()
    session.refresh(company)
    return company


@pytest.fixture
def project(session, company):
    project = Project(nombre="Portal de clientes", empresa_id=company.id, estado="en_progreso")
    session.add(project)
    session.commit()
    session.refresh(project)
    return project


@pytest.fixture
def task(session, project):
    task = Task(nombre="Diseñar login", proyecto_id=project.id, horas_estimadas=8, prioridad="alta")
    session.add(task)
    session.commit()
    session.refresh(task)
    return task
