"""
Seed the database with a demo user and their Shopify store.

Secrets come from the environment and are encrypted with ENCRYPTION_KEY:
    SHOP_USER_EMAIL, SHOP_USER_PASSWORD (already hashed), SHOP_USER_NAME,
    SHOP_DOMAIN, SHOP_ACCESS_TOKEN, SHOP_API_KEY
"""
import asyncio
import os
import sys

from sqlalchemy import select

from app.core.config import settings
from app.core.crypto import CredentialCipher
from app.core.database import close_db, get_db_context, init_db
from app.core.exceptions import AppError
from app.core.logging import configure_logging, get_logger
from app.models.database import User
from app.services.store_service import store_service

logger = get_logger("seed")

SEED_USERS = [
    {
        "email": os.getenv("SHOP_USER_EMAIL", "user@example.com"),
        "password_hash": os.getenv("SHOP_USER_PASSWORD", "$2b$10$8ZqkL9z8y2z5Z0y8ZqkL9u"),
        "name": os.getenv("SHOP_USER_NAME", "Demo User"),
        "shopify_domain": os.getenv("SHOP_DOMAIN", "example.myshopify.com"),
        "access_token": os.getenv("SHOP_ACCESS_TOKEN", ""),
        "api_key": os.getenv("SHOP_API_KEY", ""),
    },
]


async def seed() -> None:
    """Upsert every seed user and the store linked to them."""
    cipher = CredentialCipher(settings.encryption_key)
    await init_db()

    async with get_db_context() as db:
        for user_data in SEED_USERS:
            result = await db.execute(select(User).where(User.email == user_data["email"]))
            user = result.scalar_one_or_none()
            if user:
                user.password_hash = user_data["password_hash"]
                user.name = user_data["name"]
            else:
                user = User(
                    email=user_data["email"],
                    password_hash=user_data["password_hash"],
                    name=user_data["name"],
                )
                db.add(user)
            await db.flush()

            await store_service.connect_store(
                db,
                cipher,
                user_id=user.id,
                shopify_domain=user_data["shopify_domain"],
                access_token=user_data["access_token"],
                api_key=user_data["api_key"] or None,
            )
            logger.info(f"Upserted user {user_data['name']} with store {user_data['shopify_domain']}")


async def main() -> int:
    configure_logging(log_level=settings.log_level)
    try:
        await seed()
    except AppError as e:
        logger.error(f"Seeding failed: {e.message}", extra=e.details)
        return 1
    finally:
        await close_db()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
