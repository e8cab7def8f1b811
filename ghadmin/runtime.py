import logging

from ghadmin.services.bulk_service import BulkDispatcher
from ghadmin.services.session_service import SessionManager

logger = logging.getLogger(__name__)

_manager: SessionManager | None = None


def get_manager() -> SessionManager:
    if _manager is None:
        raise RuntimeError("Session manager not initialized. Call init_manager() first.")
    return _manager


def get_dispatcher() -> BulkDispatcher:
    manager = get_manager()
    return BulkDispatcher(manager.require_gateway, manager.config_store)


async def init_manager(manager: SessionManager | None = None) -> SessionManager:
    global _manager
    _manager = manager or SessionManager()
    status = await _manager.startup()
    logger.info("Session manager ready (connected=%s)", status.is_connected)
    return _manager


def close_manager() -> None:
    global _manager
    if _manager is not None:
        _manager.close()
        _manager = None
