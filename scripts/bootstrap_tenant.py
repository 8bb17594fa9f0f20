# flake8: noqa
# scripts/bootstrap_tenant.py

"""
새 의료기관(테넌트)과 첫 MASTER 사용자를 만드는 운영 스크립트입니다.

    python -m scripts.bootstrap_tenant --tenant "Hospital Central" --plan PROFISSIONAL -u admin

--create-tables 옵션을 주면 스키마와 테이블도 먼저 생성합니다 (개발 환경용).
"""

import asyncio
import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import AsyncSessionLocal, create_db_and_tables
from app.core.exceptions import ValidationError
from app.domains.usr import crud as usr_crud
from app.domains.usr import schemas as usr_schemas
from app.domains.usr.models import TenantPlan, UserRole

cli = typer.Typer()


async def bootstrap_tenant(
    db: AsyncSession,
    *,
    tenant_name: str,
    plan: TenantPlan,
    user_in: usr_schemas.UserCreate,
) -> None:
    if await usr_crud.user.get_by_username(db, username=user_in.username):
        print(f"오류: 이미 존재하는 사용자명입니다: {user_in.username}")
        return

    tenant = await usr_crud.tenant.create(db, name=tenant_name, plan=plan)
    try:
        await usr_crud.user.create(db, obj_in=user_in, tenant_id=tenant.id)
    except ValidationError as e:
        print(f"오류: {e.message}")
        return
    print(f"테넌트 '{tenant.name}' (id={tenant.id}, plan={tenant.plan.value}) 와 MASTER '{user_in.username}' 생성 완료")


@cli.command()
def main(
    tenant_name: str = typer.Option(
        ..., '--tenant', '-t',
        prompt="의료기관 이름을 입력하세요",
        help="생성할 테넌트(의료기관)의 이름입니다."
    ),
    plan: TenantPlan = typer.Option(
        TenantPlan.ESSENCIAL, '--plan',
        help="구독 요금제 (ESSENCIAL / PROFISSIONAL / ENTERPRISE)."
    ),
    username: str = typer.Option(
        ..., '--username', '-u',
        prompt="MASTER 사용자명(ID)을 입력하세요",
        help="로그인 시 사용할 사용자명(ID)입니다."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="MASTER 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="비밀번호 (최소 8자 이상)."
    ),
    full_name: str = typer.Option(
        "Administrador", '--name', '-n',
        help="MASTER 사용자의 이름입니다."
    ),
    create_tables: bool = typer.Option(
        False, '--create-tables',
        help="스키마와 테이블을 먼저 생성합니다 (개발 환경용)."
    ),
):
    if len(password) < 8:
        print("오류: 비밀번호는 최소 8자 이상이어야 합니다.")
        raise typer.Abort()

    user_data = usr_schemas.UserCreate(
        username=username,
        password=password,
        full_name=full_name,
        role=UserRole.MASTER,
    )

    async def run_bootstrap():
        if create_tables:
            await create_db_and_tables()
        async with AsyncSessionLocal() as db:
            await bootstrap_tenant(db, tenant_name=tenant_name, plan=plan, user_in=user_data)

    asyncio.run(run_bootstrap())


if __name__ == "__main__":
    cli()
