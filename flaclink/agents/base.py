#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base class for processing agents.
The detector and linker agents inherit from this.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """
    Abstract base class for processing agents.

    Agents are responsible for specific tasks in the pipeline:
    - Detector: Decide which directories are albums and list their contents
    - Linker: Hardlink an album into the library
    """

    def __init__(self, config):
        """
        Initialize agent with configuration.

        Args:
            config: ConfigManager instance
        """
        self.config = config
        self._start_time: Optional[float] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Agent name identifier"""
        pass

    @abstractmethod
    def process(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a single item (album directory).

        Args:
            item: Dictionary with album info including 'path'

        Returns:
            Dictionary with processing results
        """
        pass

    def log(self, message: str) -> None:
        """Log a message with agent name prefix"""
        logger.info(f"[{self.name}] {message}")

    def log_debug(self, message: str) -> None:
        """Log a detail message, shown with --verbose"""
        logger.debug(f"[{self.name}] {message}")

    def log_error(self, message: str) -> None:
        """Log an error message"""
        logger.error(f"[{self.name}] ERROR: {message}")

    def start_timer(self) -> None:
        self._start_time = time.time()

    @property
    def elapsed(self) -> float:
        """Seconds since start_timer, 0 if never started"""
        return time.time() - self._start_time if self._start_time else 0.0
