# tests/conftest.py

import os

# app.core.config 의 Settings는 임포트 시점에 환경 변수를 읽으므로, 앱 임포트 전에 지정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only")
os.environ.setdefault("APP_ENV", "testing")

from datetime import datetime, UTC  # noqa: E402
from typing import AsyncGenerator, Callable, Awaitable, Optional  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

# app.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from app.main import app as main_app  # noqa: E402
from app.core import dependencies as deps  # noqa: E402
from app.core.clock import FixedClock  # noqa: E402
from app.core.database import SCHEMAS, get_session  # noqa: E402
from app.core.rate_limit import limiter  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402

# --- 모든 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하려면 모든 모델 클래스가 한 번 이상 임포트되어야 합니다.
from app.domains.models import *  # noqa: F401, F403, E402

from app.domains.usr import models as usr_models  # noqa: E402
from app.domains.fms import models as fms_models  # noqa: E402


# --- 테스트용 데이터베이스 설정 ---
# 테스트마다 새 인메모리 SQLite DB를 만들고, 도메인 스키마는 ATTACH로 흉내냅니다.
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# 모든 테스트의 기준 시각 (주입 시계)
FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

TEST_PASSWORD = "testpass123"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,  # 모든 세션이 같은 인메모리 연결을 공유
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _attach_schemas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        for schema_name in SCHEMAS:
            cursor.execute(f"ATTACH DATABASE ':memory:' AS {schema_name}")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    테스트 데이터 준비와 검증에 쓰는 세션입니다.
    API 요청은 요청마다 별도의 세션을 사용하므로, 요청 이후의 값을 확인할 때는 reload()를 사용합니다.
    """
    async with session_factory() as session:
        yield session


async def reload(db_session: AsyncSession, model, id: int):
    """
    레코드 하나를 DB에서 다시 읽어 세션의 값을 덮어씁니다.
    세션 전체를 만료시키지 않으므로 픽스처 객체(master_user 등)의 속성은 그대로 사용할 수 있습니다.
    """
    return await db_session.get(model, id, populate_existing=True)


@pytest.fixture(scope="function")
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture(scope="session")
def password_hash() -> str:
    # bcrypt 해싱은 느리므로 세션당 한 번만 계산합니다.
    return get_password_hash(TEST_PASSWORD)


# --- 팩토리 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def tenant_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.Tenant]]:
    async def _create_tenant(
        name: str, plan: usr_models.TenantPlan = usr_models.TenantPlan.PROFISSIONAL, **kwargs
    ) -> usr_models.Tenant:
        tenant = usr_models.Tenant(name=name, plan=plan, **kwargs)
        db_session.add(tenant)
        await db_session.commit()
        await db_session.refresh(tenant)
        return tenant
    return _create_tenant


@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession, password_hash: str) -> Callable[..., Awaitable[usr_models.User]]:
    """역할과 테넌트를 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다."""
    async def _create_user(
        username: str,
        role: usr_models.UserRole,
        tenant_id: int,
        is_active: bool = True,
        **kwargs,
    ) -> usr_models.User:
        user = usr_models.User(
            username=username,
            password_hash=password_hash,
            email=f"{username}@example.com",
            role=role,
            tenant_id=tenant_id,
            is_active=is_active,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
def equipment_factory(db_session: AsyncSession) -> Callable[..., Awaitable[fms_models.Equipment]]:
    async def _create_equipment(
        tenant_id: int,
        name: str = "Monitor Multiparametrico",
        criticality: fms_models.Criticality = fms_models.Criticality.C,
        contingency_plan: Optional[str] = None,
        **kwargs,
    ) -> fms_models.Equipment:
        equipment = fms_models.Equipment(
            tenant_id=tenant_id,
            name=name,
            criticality=criticality,
            contingency_plan=contingency_plan,
            **kwargs,
        )
        db_session.add(equipment)
        await db_session.commit()
        await db_session.refresh(equipment)
        return equipment
    return _create_equipment


# --- 테넌트 / 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def tenant(tenant_factory) -> usr_models.Tenant:
    """PROFISSIONAL 요금제 테넌트 (모든 정비 기능 허용)."""
    return await tenant_factory("Hospital Central")


@pytest_asyncio.fixture(scope="function")
async def basic_tenant(tenant_factory) -> usr_models.Tenant:
    """ESSENCIAL 요금제 테넌트 (예방 정비만 허용)."""
    return await tenant_factory("Clinica Basica", plan=usr_models.TenantPlan.ESSENCIAL)


@pytest_asyncio.fixture(scope="function")
async def other_tenant(tenant_factory) -> usr_models.Tenant:
    return await tenant_factory("Hospital Vizinho")


@pytest_asyncio.fixture(scope="function")
async def master_user(user_factory, tenant) -> usr_models.User:
    return await user_factory("master", usr_models.UserRole.MASTER, tenant.id, full_name="Gestora Master")


@pytest_asyncio.fixture(scope="function")
async def tecnico_user(user_factory, tenant) -> usr_models.User:
    return await user_factory("tecnico", usr_models.UserRole.TECNICO, tenant.id)


@pytest_asyncio.fixture(scope="function")
async def coordenador_user(user_factory, tenant) -> usr_models.User:
    return await user_factory("coordenador", usr_models.UserRole.COORDENADOR, tenant.id)


@pytest_asyncio.fixture(scope="function")
async def fiscal_user(user_factory, tenant) -> usr_models.User:
    return await user_factory("fiscal", usr_models.UserRole.FISCAL, tenant.id)


@pytest_asyncio.fixture(scope="function")
async def basic_master_user(user_factory, basic_tenant) -> usr_models.User:
    return await user_factory("basicmaster", usr_models.UserRole.MASTER, basic_tenant.id)


@pytest_asyncio.fixture(scope="function")
async def other_master_user(user_factory, other_tenant) -> usr_models.User:
    return await user_factory("othermaster", usr_models.UserRole.MASTER, other_tenant.id)


# --- 설비 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def equipment(equipment_factory, tenant) -> fms_models.Equipment:
    """위험 등급 C 설비 (SLA 24시간)."""
    return await equipment_factory(tenant.id, name="Bomba de Infusao", serial_number="BI-001")


@pytest_asyncio.fixture(scope="function")
async def critical_equipment(equipment_factory, tenant) -> fms_models.Equipment:
    """위험 등급 A 설비 (SLA 10분, 비상 계획 필수)."""
    return await equipment_factory(
        tenant.id,
        name="Ventilador Pulmonar",
        criticality=fms_models.Criticality.A,
        contingency_plan="Utilizar ventilador reserva da UTI 2.",
    )


@pytest_asyncio.fixture(scope="function")
async def other_equipment(equipment_factory, other_tenant) -> fms_models.Equipment:
    return await equipment_factory(other_tenant.id, name="Equipamento de outro hospital")


# --- API 클라이언트 픽스처 ---
@pytest.fixture(scope="function")
def app_overrides(session_factory, clock):
    """
    요청마다 새 세션을 열도록 get_session을, 고정 시계를 쓰도록 get_clock을 교체합니다.
    """
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    def override_get_clock() -> FixedClock:
        return clock

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides.update({
        get_session: override_get_session,
        deps.get_clock: override_get_clock,
    })
    yield
    main_app.dependency_overrides.clear()
    main_app.dependency_overrides.update(original_overrides)


@pytest_asyncio.fixture(scope="function")
async def client(app_overrides) -> AsyncGenerator[AsyncClient, None]:
    """인증되지 않은 클라이언트 (공개 엔드포인트 및 로그인 테스트용)."""
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture(scope="function")
def authorized_client_factory(app_overrides) -> Callable[[usr_models.User], AsyncGenerator[AsyncClient, None]]:
    """
    특정 사용자로 실제 로그인(/api/v1/usr/auth/token)한 AsyncClient를 만드는 팩토리를 반환합니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str = TEST_PASSWORD) -> AsyncGenerator[AsyncClient, None]:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as async_client:
            login_data = {"username": user.username, "password": password}
            res = await async_client.post("/api/v1/usr/auth/token", data=login_data)
            if res.status_code != 200:
                pytest.fail(f"Login failed for {user.username}: {res.text}")
            token = res.json()["access_token"]
            async_client.headers["Authorization"] = f"Bearer {token}"
            yield async_client

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def master_client(authorized_client_factory, master_user) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(master_user) as async_client:
        yield async_client


@pytest_asyncio.fixture(scope="function")
async def tecnico_client(authorized_client_factory, tecnico_user) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(tecnico_user) as async_client:
        yield async_client


@pytest_asyncio.fixture(scope="function")
async def coordenador_client(authorized_client_factory, coordenador_user) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(coordenador_user) as async_client:
        yield async_client


@pytest_asyncio.fixture(scope="function")
async def fiscal_client(authorized_client_factory, fiscal_user) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(fiscal_user) as async_client:
        yield async_client


@pytest_asyncio.fixture(scope="function")
async def basic_client(authorized_client_factory, basic_master_user) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(basic_master_user) as async_client:
        yield async_client


@pytest_asyncio.fixture(scope="function")
async def other_client(authorized_client_factory, other_master_user) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(other_master_user) as async_client:
        yield async_client
