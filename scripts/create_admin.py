# scripts/create_admin.py
# 실행: python -m scripts.create_admin --email admin@stockmaster.com --name "Admin"

import asyncio
import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.database import get_async_session_context
from stockmaster.domains.usr import crud as usr_crud
from stockmaster.domains.usr import schemas as usr_schemas
from stockmaster.domains.usr.models import UserRole

cli = typer.Typer()


async def create_admin_user(db: AsyncSession, user_in: usr_schemas.UserCreate) -> bool:
    """
    데이터베이스에 관리자 사용자를 생성합니다. 이미 존재하는 이메일이면 False 를 반환합니다.
    """
    if await usr_crud.user.get_by_email(db, email=user_in.email):
        typer.echo(f"오류: 이미 존재하는 이메일입니다: {user_in.email}")
        return False

    await usr_crud.user.create(db, obj_in=user_in)
    typer.echo(f"관리자 계정이 생성되었습니다: {user_in.email}")
    return True


@cli.command()
def main(
    email: str = typer.Option(
        ..., '--email', '-e',
        prompt="관리자 이메일을 입력하세요",
        help="생성할 관리자 계정의 이메일 주소입니다. (로그인 ID)"
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="관리자 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="관리자 계정의 비밀번호입니다. (최소 8자 이상)"
    ),
    name: str = typer.Option(
        "Admin", '--name', '-n',
        help="관리자의 이름입니다."
    ),
):
    """
    Stock Master 를 위한 새로운 관리자(ADMIN) 계정을 생성합니다.
    """
    if len(password) < 8:
        typer.echo("오류: 비밀번호는 최소 8자 이상이어야 합니다.")
        raise typer.Abort()

    user_data = usr_schemas.UserCreate(email=email, name=name, password=password, role=UserRole.ADMIN)

    async def run_creation():
        async with get_async_session_context() as db:
            return await create_admin_user(db=db, user_in=user_data)

    if not asyncio.run(run_creation()):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
