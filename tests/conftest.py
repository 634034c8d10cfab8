"""
Shared fixtures: banco SQLite em memoria por teste, empresas, usuarios
e cliente HTTP sobre a aplicacao.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_principal_resolver
from app.core import generate_auth_subject, get_password_hash
from app.core.authorization import Principal
from app.database import Base, get_db
from app.main import app
from app.models import Company, User, UserRole
from app.services import PrincipalResolver
from app.services.identity import principal_for


class FixedPrincipalResolver(PrincipalResolver):
    """Resolver de teste: ignora a credencial e devolve sempre o mesmo principal"""

    def __init__(self, principal: Principal):
        self.principal = principal

    async def resolve(self, credential):
        return self.principal


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def add_company(db, name="Padaria Central", email=None, max_users=10, is_active=True) -> Company:
    company = Company(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        plan="basic",
        max_users=max_users,
        is_active=is_active,
    )
    db.add(company)
    await db.flush()
    return company


async def add_user(db, email, role=UserRole.ADMIN.value, company=None, password="secret123") -> User:
    user = User(
        auth_subject=generate_auth_subject(),
        email=email,
        name=email.split("@")[0],
        hashed_password=get_password_hash(password),
        role=role,
        company_id=company.id if company else None,
    )
    db.add(user)
    await db.flush()
    return user


@pytest.fixture
async def tenants(db):
    """Duas empresas, um admin em cada e um MASTER"""
    company_a = await add_company(db, "Empresa A")
    company_b = await add_company(db, "Empresa B")
    admin_a = await add_user(db, "admin@a.com", company=company_a)
    admin_b = await add_user(db, "admin@b.com", company=company_b)
    master = await add_user(db, "root@stockeasy.com", role=UserRole.MASTER.value)
    await db.commit()
    return {
        "company_a": company_a,
        "company_b": company_b,
        "a": principal_for(admin_a),
        "b": principal_for(admin_b),
        "master": principal_for(master),
    }


@pytest.fixture
async def client(session_factory):
    """Cliente HTTP com o banco do teste; o resolver de token e o de producao"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Fixa o principal das proximas requisicoes"""

    def _act_as(principal: Principal):
        app.dependency_overrides[get_principal_resolver] = lambda: FixedPrincipalResolver(principal)

    return _act_as
