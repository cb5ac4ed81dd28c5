"""Store credential persistence."""

import logging
import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.crypto import CredentialCipher
from app.core.exceptions import (
    DatabaseError,
    DecryptError,
    InvalidShopDomainError,
    ResourceNotFoundError,
    StoreNotFoundError,
)
from app.core.logging import security_logger
from app.models.database import Store, User

logger = logging.getLogger(__name__)

SHOP_DOMAIN_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-]*\.myshopify\.com$")


def normalize_shop_domain(shop_domain: str) -> str:
    """
    Normalize a shop domain to its bare myshopify hostname.

    Accepts "my-store", "my-store.myshopify.com" or a full admin URL.
    """
    shop = shop_domain.strip().lower()
    shop = re.sub(r"^https?://", "", shop).split("/", 1)[0]
    if shop and "." not in shop:
        shop = f"{shop}.myshopify.com"
    if not SHOP_DOMAIN_PATTERN.match(shop):
        raise InvalidShopDomainError(shop_domain)
    return shop


class StoreService:
    """Lookup and storage of per-user Shopify store credentials."""

    async def get_active_store(self, db: AsyncSession, user_id: int) -> Optional[Store]:
        """Return the user's first active store, or None."""
        try:
            stmt = (
                select(Store)
                .where(Store.user_id == user_id, Store.is_active.is_(True))
                .order_by(Store.id)
                .limit(1)
            )
            result = await db.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Database error looking up store: {str(e)}")
            raise DatabaseError("get_active_store") from e

    async def connect_store(
        self,
        db: AsyncSession,
        cipher: CredentialCipher,
        user_id: int,
        shopify_domain: str,
        access_token: str,
        api_key: Optional[str] = None,
    ) -> Store:
        """
        Encrypt and save a store's credentials, creating or updating by domain.

        Raises:
            InvalidShopDomainError: domain is not a myshopify hostname.
            ResourceNotFoundError: the user does not exist.
        """
        domain = normalize_shop_domain(shopify_domain)

        try:
            user = await db.get(User, user_id)
            if user is None:
                raise ResourceNotFoundError(message="User not found", details={"user_id": user_id})

            result = await db.execute(select(Store).where(Store.shopify_domain == domain))
            store = result.scalar_one_or_none()

            encrypted_token = cipher.encrypt(access_token)
            encrypted_api_key = cipher.encrypt(api_key) if api_key else None

            if store:
                store.user_id = user_id
                store.encrypted_access_token = encrypted_token
                store.encrypted_api_key = encrypted_api_key
                store.is_active = True
                logger.info(f"Updated store {domain} for user {user_id}")
            else:
                store = Store(
                    user_id=user_id,
                    shopify_domain=domain,
                    encrypted_access_token=encrypted_token,
                    encrypted_api_key=encrypted_api_key,
                )
                db.add(store)
                logger.info(f"Created store {domain} for user {user_id}")

            await db.commit()
            await db.refresh(store)

        except SQLAlchemyError as e:
            logger.error(f"Database error saving store: {str(e)}")
            await db.rollback()
            raise DatabaseError("connect_store") from e

        security_logger.log_credential_access(user_id, domain, "saved")
        return store

    async def disconnect_store(self, db: AsyncSession, user_id: int) -> Store:
        """Deactivate the user's active store."""
        store = await self.get_active_store(db, user_id)
        if store is None:
            raise StoreNotFoundError(user_id)

        try:
            store.is_active = False
            await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Database error deactivating store: {str(e)}")
            await db.rollback()
            raise DatabaseError("disconnect_store") from e

        security_logger.log_credential_access(user_id, store.shopify_domain, "deactivated")
        return store

    def decrypt_access_token(self, cipher: CredentialCipher, store: Store) -> str:
        """Decrypt the store's access token; DecryptError propagates."""
        try:
            token = cipher.decrypt(store.encrypted_access_token)
        except DecryptError as e:
            security_logger.log_decrypt_failure(store.shopify_domain, e.details.get("reason", ""))
            raise
        security_logger.log_credential_access(store.user_id, store.shopify_domain, "decrypted")
        return token


# Global store service instance
store_service = StoreService()
