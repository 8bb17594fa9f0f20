# app/domains/ven/crud.py

"""
'ven' 도메인 (공급업체)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import Optional, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import NotFoundError
from . import models as ven_models
from . import schemas as ven_schemas


class CRUDProvider(CRUDBase[ven_models.Provider, ven_schemas.ProviderCreate, ven_schemas.ProviderCreate]):
    def __init__(self):
        super().__init__(model=ven_models.Provider)

    async def resolve_reference(
        self, db: AsyncSession, *, provider_id: Optional[int], tenant_id: int
    ) -> Tuple[Optional[int], Optional[str]]:
        """
        정비 레코드에 저장할 (provider_id, provider 이름) 쌍을 만듭니다.
        provider_id가 없으면 (None, None), 테넌트에 없는 공급업체면 NotFoundError.
        """
        if provider_id is None:
            return None, None
        db_provider = await self.get(db, id=provider_id, tenant_id=tenant_id)
        if db_provider is None:
            raise NotFoundError("Fornecedor nao encontrado.")
        return db_provider.id, db_provider.name


provider = CRUDProvider()
