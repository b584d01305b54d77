import asyncio
import typer
from sqlalchemy.ext.asyncio import AsyncSession

import sitecms.db_models # noqa: F401

from sitecms.config import settings
from sitecms.database import Base, async_session_factory, engine
from sitecms.users.schema import UserCreate
from sitecms.users import service as user_service

cli = typer.Typer()


async def create_tables_runner() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


async def create_user_runner(name: str, email: str, password: str, db: AsyncSession):
    print("--- User Creation ---")
    try:
        user_data = UserCreate(name=name, email=email, password=password)
        user = await user_service.create_user(user_data, db)
        print("\n✅ User created successfully!")
        print(f"   ID: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Slot: {user.registration_slot}/{settings.MAX_USERS}")
    except Exception as e:
        import traceback
        traceback.print_exc()
        print(f"\n❌ Error creating user: {e}")
        raise typer.Exit(code=1)
    finally:
        print("--- Task Finished ---")


async def clear_users_runner(db: AsyncSession) -> int:
    return await user_service.delete_all_users(db)


@cli.command(name="create-tables")
def create_tables():
    """
    Creates every table known to the models. Existing tables are left alone.
    """
    asyncio.run(create_tables_runner())
    print("✅ Tables created")


@cli.command(name="create-user")
def create_user(
    name: str = typer.Option(..., "--name", "-n", help="User's display name."),
    email: str = typer.Option(..., "--email", "-e", help="User's email address."),
    password: str = typer.Option(..., "--password", "-p", help="User's password."),
):
    """
    Registers a user from the command line. The registration cap still applies.
    """
    async def main():
        async with async_session_factory() as session:
            await create_user_runner(name=name, email=email, password=password, db=session)

    asyncio.run(main())


@cli.command(name="clear-users")
def clear_users(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
):
    """
    Deletes every user, which frees all registration slots.
    """
    if not yes:
        typer.confirm("Delete ALL users?", abort=True)

    async def main():
        async with async_session_factory() as session:
            return await clear_users_runner(session)

    deleted = asyncio.run(main())
    print(f"✅ All users deleted ({deleted})")


@cli.command()
def runserver(reload: bool = typer.Option(False, "--reload", help="Restart on code changes.")):
    """
    Serves the API with uvicorn on APP_HOST:APP_PORT.
    """
    import uvicorn

    uvicorn.run("sitecms.main:app", host=settings.APP_HOST, port=settings.APP_PORT, reload=reload)


if __name__ == "__main__":
    cli()
