# cloudstage/scripts/create_tables.py
import asyncio

from dotenv import load_dotenv
load_dotenv()

from cloudstage.core.config import get_settings
from cloudstage.db.base import Base, import_models
from cloudstage.db.session import build_engine

# IMPORTANT:
# Every model must be imported so SQLAlchemy registers it in Base.metadata
import_models()


async def create_all_tables() -> None:
    engine = build_engine(get_settings().DATABASE_URL)
    print("Creating database tables...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print("✅ Database tables created successfully!")
    except Exception as e:
        print(f"❌ Failed to create database tables: {e}")
        raise
    finally:
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_all_tables())
