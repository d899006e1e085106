"""
Base Service
Shared logging and validation helpers for service classes
"""

import logging
from typing import Optional

from tubescout.app.config import Config, get_config
from tubescout.services.exceptions import ValidationError


class BaseService:
    """
    Base class for services

    Provides:
    - Service-scoped logger with name prefix
    - Common input validation helpers
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self.logger = logging.getLogger(f"tubescout.services.{self.get_service_name()}")

    def get_service_name(self) -> str:
        """Short service name used in log lines"""
        return self.__class__.__name__.lower()

    # ========================================================================
    # Logging
    # ========================================================================

    def log_debug(self, message: str) -> None:
        self.logger.debug(f"[{self.get_service_name()}] {message}")

    def log_info(self, message: str) -> None:
        self.logger.info(f"[{self.get_service_name()}] {message}")

    def log_warning(self, message: str) -> None:
        self.logger.warning(f"[{self.get_service_name()}] {message}")

    # ========================================================================
    # Validation
    # ========================================================================

    def validate_positive(self, value: int, field_name: str) -> None:
        if value is None or value <= 0:
            raise ValidationError(f"{field_name} must be positive", field=field_name)

    def validate_non_negative(self, value: int, field_name: str) -> None:
        if value is None or value < 0:
            raise ValidationError(
                f"{field_name} must not be negative", field=field_name
            )
