# seqassign/core/base_pipeline.py
import logging
from typing import Any, Dict, Optional

from ..config import ConfigManager
from ..exceptions import ConfigurationError


class BasePipeline:
    """Base class for all pipeline components"""

    def __init__(self, config_manager: Optional[ConfigManager] = None, logger_name: Optional[str] = None):
        """
        Initialize with a configuration manager

        Args:
            config_manager: Configuration manager (defaults and environment when omitted)
            logger_name: Name for the logger
        """
        self.config_manager = config_manager or ConfigManager()
        self.config: Dict[str, Any] = self.config_manager.config
        self.logger = logging.getLogger(logger_name or "seqassign.pipeline")
        self.output_files: Dict[str, str] = {}

        self._check_schema()
        self._load_configuration()
        self._validate_config()

    def _load_configuration(self) -> None:
        """Load component-specific configuration"""
        pass  # To be implemented by subclasses

    def _validate_config(self) -> None:
        """Validate component configuration"""
        pass  # To be implemented by subclasses

    def _check_schema(self) -> None:
        """Reject configurations that failed schema validation"""
        if self.config_manager.errors:
            error_msg = f"Invalid configuration: {'; '.join(self.config_manager.errors)}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg, {"errors": list(self.config_manager.errors)})

    def _record_output(self, file_type: str, file_path: str) -> str:
        self.output_files[file_type] = file_path
        self.logger.debug(f"Wrote {file_type}: {file_path}")
        return file_path
