# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.

모든 정비 데이터는 테넌트 소유이므로, 조회/수정/삭제는 tenant_id 조건을 필수로 받습니다.
다른 테넌트의 레코드는 존재하지 않는 레코드와 똑같이 취급됩니다 (None 반환).
"""

from typing import Generic, List, Optional, Type, TypeVar, Any, Dict

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, *, id: Any, tenant_id: int) -> Optional[ModelType]:
        """
        ID와 테넌트를 기준으로 단일 레코드를 조회합니다.
        """
        statement = select(self.model).where(self.model.id == id, self.model.tenant_id == tenant_id)
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        tenant_id: int,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[ModelType]:
        """
        테넌트의 여러 레코드를 조회합니다. filters의 값이 None인 항목은 무시합니다.
        """
        query = select(self.model).where(self.model.tenant_id == tenant_id)
        for attribute, value in (filters or {}).items():
            if value is not None and hasattr(self.model, attribute):
                query = query.where(getattr(self.model, attribute) == value)
        query = query.order_by(self.model.id.desc()).offset(skip).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType, tenant_id: int) -> ModelType:
        """
        새로운 레코드를 생성합니다.
        """
        db_obj = self.model.model_validate(obj_in, update={"tenant_id": tenant_id})
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """
        기존 레코드를 업데이트합니다.
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: Any, tenant_id: int) -> Optional[ModelType]:
        """
        ID와 테넌트를 기준으로 레코드를 삭제합니다.
        """
        db_obj = await self.get(db, id=id, tenant_id=tenant_id)
        if db_obj:
            await db.delete(db_obj)
            await db.commit()
        return db_obj
