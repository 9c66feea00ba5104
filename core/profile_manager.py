# core/profile_manager.py

import logging
from .local_store import PROFILE, LocalStore
from .models import PROFILE_KEY, ProfileRecord

logger = logging.getLogger(__name__)


class ProfileManager:
    """Handles the farmer's single profile record in the local store."""

    def __init__(self, store: LocalStore):
        self.store = store

    async def get_profile(self):
        for data in await self.store.get_all(PROFILE):
            if data.get("key") == PROFILE_KEY:
                return ProfileRecord(**data)
        return None

    async def load_profile(self) -> ProfileRecord:
        return await self.get_profile() or ProfileRecord()

    async def save_profile(self, profile: ProfileRecord):
        await self.store.put(PROFILE, profile)
        logger.info("---PROFILE MANAGER: Saved profile---")

    async def update_profile(self, **changes) -> ProfileRecord:
        profile = await self.load_profile()
        updated = profile.model_copy(update=changes)
        await self.save_profile(updated)
        return updated
