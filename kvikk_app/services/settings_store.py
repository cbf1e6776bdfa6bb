# kvikk_app/services/settings_store.py
"""
Merchant settings persistence, one record per shop domain.

The store is injected into routes and services; SQLAlchemySettingsStore is the
production implementation, InMemorySettingsStore backs tests and local runs
without a database.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kvikk_app.core.config import KvikkConfig
from kvikk_app.core.exceptions import SettingsStoreError
from kvikk_app.models.merchant_settings import MerchantSettings
from kvikk_app.schemas.settings import (
    API_KEY_MASK,
    DEFAULT_SENDER,
    MerchantSettingsData,
    MerchantSettingsRead,
    MerchantSettingsUpdate,
    SenderProfile,
)

logger = logging.getLogger(__name__)


class SettingsStore(ABC):
    """Read/write merchant configuration keyed by shop domain"""

    def __init__(self, config: KvikkConfig):
        self.config = config

    @abstractmethod
    async def _load(self, shop: str) -> Optional[MerchantSettingsData]:
        pass

    @abstractmethod
    async def _store(self, data: MerchantSettingsData) -> None:
        pass

    async def get_settings(self, shop: str) -> MerchantSettingsData:
        """Stored settings, or the install-time defaults if the shop has none"""
        return await self._load(shop) or MerchantSettingsData(shop_domain=shop)

    async def initialize(self, shop: str) -> MerchantSettingsData:
        """Create the default record at install time. Existing records are kept."""
        existing = await self._load(shop)
        if existing:
            return existing
        data = MerchantSettingsData(shop_domain=shop)
        await self._store(data)
        logger.info(f"Initialized settings for {shop}")
        return data

    async def save_merchant_settings(self, shop: str, update: MerchantSettingsUpdate) -> MerchantSettingsData:
        """Apply the fields present in `update`; omitted fields keep their stored values."""
        current = await self.get_settings(shop)
        changes = update.model_dump(exclude_unset=True)

        # The form echoes the mask back when the merchant did not touch the key
        api_key = changes.pop("kvikk_api_key", None)
        if api_key and api_key != API_KEY_MASK:
            changes["kvikk_api_key"] = api_key

        if not changes.get("sender_country_code"):
            changes.pop("sender_country_code", None)

        data = current.model_copy(update=changes)
        await self._store(data)
        logger.info(
            f"Settings saved for {shop}: default_service={data.default_service.value}, "
            f"auto_create_shipments={data.auto_create_shipments}"
        )
        return data

    async def resolve_api_key(self, shop: Optional[str]) -> str:
        """Merchant's own key, else the environment key"""
        if shop:
            data = await self._load(shop)
            if data and data.kvikk_api_key:
                return data.kvikk_api_key
        return self.config.api_key

    async def sender_profile(self, shop: str) -> SenderProfile:
        sender = (await self.get_settings(shop)).sender_profile()
        if not sender.is_complete:
            logger.warning(f"No complete sender profile for {shop}, using the default sender")
            return DEFAULT_SENDER
        return sender

    async def read_merchant_settings(self, shop: str) -> MerchantSettingsRead:
        """Settings as shown to the merchant; the raw API key never leaves the store"""
        data = await self.get_settings(shop)
        has_key = bool(data.kvikk_api_key or self.config.api_key)
        return MerchantSettingsRead(
            kvikk_api_key=API_KEY_MASK if has_key else "",
            default_service=data.default_service,
            auto_create_shipments=data.auto_create_shipments,
            sender_info=data.sender_profile(),
        )


class InMemorySettingsStore(SettingsStore):
    """Process-local store, lost on restart"""

    def __init__(self, config: KvikkConfig):
        super().__init__(config)
        self._records: Dict[str, MerchantSettingsData] = {}

    async def _load(self, shop: str) -> Optional[MerchantSettingsData]:
        record = self._records.get(shop)
        return record.model_copy() if record else None

    async def _store(self, data: MerchantSettingsData) -> None:
        self._records[data.shop_domain] = data.model_copy()


class SQLAlchemySettingsStore(SettingsStore):
    """Settings in the merchant_settings table"""

    def __init__(self, config: KvikkConfig, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(config)
        self.session_factory = session_factory

    async def _load(self, shop: str) -> Optional[MerchantSettingsData]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(MerchantSettings).where(MerchantSettings.shop_domain == shop)
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error loading settings for {shop}: {str(e)}")
            raise SettingsStoreError(f"Could not load settings for {shop}") from e

        return MerchantSettingsData.from_orm_model(row) if row else None

    async def _store(self, data: MerchantSettingsData) -> None:
        values = data.model_dump()
        values["default_service"] = data.default_service.value

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(MerchantSettings).where(MerchantSettings.shop_domain == data.shop_domain)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    session.add(MerchantSettings(**values))
                else:
                    for field, value in values.items():
                        setattr(row, field, value)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving settings for {data.shop_domain}: {str(e)}")
            raise SettingsStoreError(f"Could not save settings for {data.shop_domain}") from e
