# mockmp/infra/__init__.py
"""Infrastructure shared by the engine: logging setup and helpers."""
from mockmp.infra.logging_config import (  # noqa: F401
    LogContext,
    get_logger,
    setup_logging,
    setup_logging_from_settings,
)
