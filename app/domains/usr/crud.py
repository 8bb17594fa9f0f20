# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import ValidationError
from app.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas

# 고장 접수(교정 정비)의 담당자로 지정할 수 있는 역할
ASSIGNABLE_ROLES = (usr_models.UserRole.MASTER, usr_models.UserRole.TECNICO)


# =============================================================================
# 1. usr.tenants 테이블 CRUD
# =============================================================================
class CRUDTenant:
    async def get(self, db: AsyncSession, *, id: int) -> Optional[usr_models.Tenant]:
        return await db.get(usr_models.Tenant, id)

    async def create(
        self, db: AsyncSession, *, name: str, plan: usr_models.TenantPlan = usr_models.TenantPlan.ESSENCIAL
    ) -> usr_models.Tenant:
        db_tenant = usr_models.Tenant(name=name, plan=plan)
        db.add(db_tenant)
        await db.commit()
        await db.refresh(db_tenant)
        return db_tenant


tenant = CRUDTenant()


# =============================================================================
# 2. usr.users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserCreate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        """사용자명으로 사용자를 조회합니다."""
        statement = select(self.model).where(self.model.username == username)
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate, tenant_id: int) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 중복을 검사합니다."""
        if await self.get_by_username(db, username=obj_in.username):
            raise ValidationError("Username already registered")

        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(
            **user_data,
            tenant_id=tenant_id,
            password_hash=get_password_hash(obj_in.password),
        )
        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        return db_user

    async def authenticate(self, db: AsyncSession, *, username: str, password: str) -> Optional[usr_models.User]:
        """사용자명과 비밀번호를 사용하여 사용자를 인증합니다."""
        user = await self.get_by_username(db, username=username)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def get_assignable(
        self, db: AsyncSession, *, tenant_id: int, user_id: Optional[int] = None
    ) -> List[usr_models.User]:
        """테넌트의 활성 MASTER/TECNICO 사용자 (user_id를 주면 해당 사용자만)."""
        statement = select(self.model).where(
            self.model.tenant_id == tenant_id,
            self.model.is_active == True,  # noqa: E712
            self.model.role.in_(ASSIGNABLE_ROLES),
        )
        if user_id is not None:
            statement = statement.where(self.model.id == user_id)
        result = await db.execute(statement.order_by(self.model.id))
        return result.scalars().all()

    async def get_tenant_master(self, db: AsyncSession, *, tenant_id: int) -> Optional[usr_models.User]:
        """테넌트의 첫 번째 활성 MASTER 사용자 (공개 신고의 접수자로 사용)."""
        statement = (
            select(self.model)
            .where(
                self.model.tenant_id == tenant_id,
                self.model.role == usr_models.UserRole.MASTER,
                self.model.is_active == True,  # noqa: E712
            )
            .order_by(self.model.id)
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalars().first()


user = CRUDUser()
