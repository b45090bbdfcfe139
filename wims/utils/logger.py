"""
Logging infrastructure for WIMS.

Provides structured logging with file rotation and audit trail integration.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from ..config.config_manager import get_config_manager
from ..models.audit_log import ActionType, AuditLog, Outcome

AUDIT_LOG_KEY = "wims-audit-log"


class WimsLogger:
    """
    Application logger for WIMS.

    Configures the ``wims`` logger hierarchy once with both file and
    console output. Component loggers are children of it.
    """

    def __init__(
        self,
        name: str = "wims",
        log_dir: Optional[str] = None,
        log_file: str = "wims.log"
    ) -> None:
        """
        Initialize logger.

        Args:
            name: Root logger name
            log_dir: Directory for log files (defaults to ``logging.dir``)
            log_file: Log file name
        """
        config = get_config_manager()

        self.name = name
        self.log_dir = Path(log_dir or config.get("logging.dir", "logs"))
        self.log_file = self.log_dir / log_file

        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_level = config.get("logging.level", "INFO")
        self.max_file_size_mb = config.get("logging.max_file_size_mb", 10)
        self.backup_count = config.get("logging.backup_count", 5)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # Remove existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        self.file_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.console_formatter = logging.Formatter(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        self._setup_file_handler()
        self._setup_console_handler()

    def _setup_file_handler(self) -> None:
        """Set up rotating file handler."""
        max_bytes = self.max_file_size_mb * 1024 * 1024

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(self.file_formatter)

        self.logger.addHandler(file_handler)

    def _setup_console_handler(self) -> None:
        """Set up console handler."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, self.log_level))
        console_handler.setFormatter(self.console_formatter)

        self.logger.addHandler(console_handler)

    def get_logger(self, component: Optional[str] = None) -> logging.Logger:
        """
        Get a logger for a component.

        Args:
            component: Component name, e.g. ``inventory_service``

        Returns:
            logging.Logger instance
        """
        if component is None or component == self.name:
            return self.logger
        return self.logger.getChild(component)


class AuditLogger:
    """
    Audit logger that writes to the local storage audit trail.

    Entries are kept most-recent-first under the ``wims-audit-log`` key.
    """

    def __init__(self, storage=None, max_entries: Optional[int] = None) -> None:
        """
        Initialize audit logger.

        Args:
            storage: LocalStorage instance (optional)
            max_entries: Maximum number of retained entries
        """
        self.storage = storage
        self.max_entries = max_entries or get_config_manager().get("audit.max_entries", 500)
        self.file_logger = get_logger("audit")

    def log_action(
        self,
        action_type: ActionType,
        actor: str,
        details: Optional[dict] = None,
        outcome: Outcome = Outcome.SUCCESS,
        item_id: Optional[str] = None,
        order_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> None:
        """
        Log an action to the audit trail.

        Args:
            action_type: Type of action
            actor: Who performed the action
            details: Additional details
            outcome: Action outcome
            item_id: Related inventory item ID
            order_id: Related order ID
            error_message: Error message if failed
        """
        entry = AuditLog(
            action_type=action_type,
            actor=actor,
            details=details or {},
            outcome=outcome,
            item_id=item_id,
            order_id=order_id,
            error_message=error_message,
        )

        self.file_logger.info(
            f"AUDIT: {entry.action_type.value} by {actor} - {entry.outcome.value}",
            extra={"audit": entry.model_dump(mode="json")}
        )

        if self.storage is None:
            return

        try:
            entries = self.storage.get_item(AUDIT_LOG_KEY, [])
            entries.insert(0, entry.model_dump(mode="json"))
            self.storage.set_item(AUDIT_LOG_KEY, entries[:self.max_entries])
        except Exception as e:
            self.file_logger.error(f"Failed to write audit log to storage: {e}")

    def get_recent_logs(self, limit: int = 100) -> List[AuditLog]:
        """
        Get recent audit logs from storage.

        Args:
            limit: Maximum number of logs to retrieve

        Returns:
            List of audit log entries, most recent first
        """
        if self.storage is None:
            return []

        entries = self.storage.get_item(AUDIT_LOG_KEY, [])
        return [AuditLog.model_validate(entry) for entry in entries[:limit]]

    def get_logs_by_actor(self, actor: str, limit: int = 100) -> List[AuditLog]:
        logs = [log for log in self.get_recent_logs(self.max_entries) if log.actor == actor]
        return logs[:limit]

    def get_logs_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditLog]:
        logs = [log for log in self.get_recent_logs(self.max_entries) if log.action_type == action_type]
        return logs[:limit]


# Global logger instances
_logger: Optional[WimsLogger] = None
_audit_logger: Optional[AuditLogger] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get application logger.

    Args:
        name: Optional component name (defaults to the root ``wims`` logger)

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = WimsLogger()
    return _logger.get_logger(name)


def get_audit_logger(storage=None) -> AuditLogger:
    """
    Get audit logger instance.

    Args:
        storage: LocalStorage instance

    Returns:
        AuditLogger instance
    """
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger(storage)
    elif storage is not None:
        _audit_logger.storage = storage
    return _audit_logger


def reset_loggers() -> None:
    """Reset global logger instances (mainly for testing)."""
    global _logger, _audit_logger
    if _logger is not None:
        for handler in list(_logger.logger.handlers):
            handler.close()
        _logger.logger.handlers.clear()
    _logger = None
    _audit_logger = None


__all__ = [
    "AuditLogger",
    "WimsLogger",
    "get_audit_logger",
    "get_logger",
    "reset_loggers",
]
