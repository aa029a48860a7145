"""Process-wide providers: config, session factory and the incident manager."""

from .config import IncidentConfig, get_config
from .database import close_engine, create_tables, get_session_factory
from .engine.incident_manager import IncidentManager
from .utils.logging import get_logger, setup_logging

_config_instance: IncidentConfig | None = None
_incident_manager: IncidentManager | None = None


def get_app_config() -> IncidentConfig:
    """Get the application config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = get_config()
    return _config_instance


def get_incident_manager() -> IncidentManager:
    """Get the incident manager singleton, bound to the configured database."""
    global _incident_manager
    if _incident_manager is None:
        config = get_app_config()
        _incident_manager = IncidentManager(db_session_factory=get_session_factory(config))
    return _incident_manager


async def startup() -> IncidentManager:
    """Configure logging, create tables and return the ready manager."""
    config = get_app_config()
    setup_logging(
        debug=config.debug,
        log_dir=config.log_dir,
        log_max_bytes=config.log_max_bytes,
        log_backup_count=config.log_backup_count,
    )
    await create_tables(config)
    get_logger("dependencies").info("startup_complete", app=config.app_name)
    return get_incident_manager()


async def shutdown() -> None:
    global _config_instance, _incident_manager
    await close_engine()
    _incident_manager = None
    _config_instance = None
