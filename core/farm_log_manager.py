# core/farm_log_manager.py

import logging
from typing import List
from .local_store import IRRIGATION_LOGS, SOIL_LOGS, LocalStore
from .models import IrrigationLog, SoilLog

logger = logging.getLogger(__name__)


def newest_first(records: List[dict]) -> List[dict]:
    """
    Ids come from a nanosecond clock, so a longer or larger id is a newer record.
    Ids set by callers need not be numeric and sort as text.
    """
    return sorted(records, key=lambda r: (len(str(r["id"])), str(r["id"])), reverse=True)


class FarmLogManager:
    """Handles the soil and irrigation logs kept for offline review."""
    def __init__(self, store: LocalStore):
        self.store = store

    async def add_soil_log(self, log: SoilLog) -> SoilLog:
        await self.store.put(SOIL_LOGS, log)
        logger.info(f"---FARM LOG MANAGER: Saved soil log {log.id}---")
        return log

    async def get_soil_logs(self, limit: int = None) -> List[SoilLog]:
        logs = [SoilLog(**data) for data in newest_first(await self.store.get_all(SOIL_LOGS))]
        return logs[:limit] if limit else logs

    async def delete_soil_log(self, log_id: str):
        await self.store.delete(SOIL_LOGS, log_id)

    async def add_irrigation_log(self, log: IrrigationLog) -> IrrigationLog:
        await self.store.put(IRRIGATION_LOGS, log)
        logger.info(f"---FARM LOG MANAGER: Saved irrigation log for {log.crop}---")
        return log

    async def get_irrigation_logs(self, limit: int = None) -> List[IrrigationLog]:
        logs = [IrrigationLog(**data) for data in newest_first(await self.store.get_all(IRRIGATION_LOGS))]
        return logs[:limit] if limit else logs

    async def delete_irrigation_log(self, log_id: str):
        await self.store.delete(IRRIGATION_LOGS, log_id)
