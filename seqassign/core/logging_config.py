# seqassign/core/logging_config.py
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional


class LoggingManager:
    """Logging setup for seqassign commands"""

    DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

    @staticmethod
    def resolve_level(verbose: bool, configured: Any = None) -> int:
        """DEBUG when verbose, else the configured level name, else INFO"""
        if verbose:
            return logging.DEBUG
        if isinstance(configured, int):
            return configured
        level = logging.getLevelName(str(configured or 'INFO').upper())
        return level if isinstance(level, int) else logging.INFO

    @staticmethod
    def log_file_path(component: str, log_file: Optional[str] = None, log_dir: Optional[str] = None) -> Optional[str]:
        """Explicit log file, or a timestamped <component>_<time>.log in log_dir"""
        if log_file or not log_dir:
            return log_file
        os.makedirs(log_dir, exist_ok=True)
        return os.path.join(log_dir, f"{component}_{datetime.now():%Y%m%d_%H%M%S}.log")

    @staticmethod
    def configure(
        verbose: bool = False,
        log_file: Optional[str] = None,
        component: str = "seqassign",
        log_dir: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> logging.Logger:
        """Configure root logging for a command run

        Args:
            verbose: Log at DEBUG regardless of configuration
            log_file: Also log to this file
            component: Logger name, and base name of generated log files
            log_dir: Directory for a generated log file when log_file is not given
            config: Configuration dict; its 'logging' section supplies level and format

        Returns:
            The component logger
        """
        settings = (config or {}).get('logging', {})
        level = LoggingManager.resolve_level(verbose, settings.get('level'))
        formatter = logging.Formatter(settings.get('format', LoggingManager.DEFAULT_FORMAT),
                                      LoggingManager.DEFAULT_DATE_FORMAT)

        handlers: List[logging.Handler] = [logging.StreamHandler()]
        log_path = LoggingManager.log_file_path(component, log_file, log_dir)
        if log_path:
            handlers.append(logging.FileHandler(log_path))
        for handler in handlers:
            handler.setFormatter(formatter)

        logging.basicConfig(level=level, handlers=handlers)

        logger = logging.getLogger(component)
        logger.setLevel(level)
        logger.info(f"Logging initialized for {component} at level {logging.getLevelName(level)}")
        if log_path:
            logger.info(f"Log file: {log_path}")
        return logger
