#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import threading
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from core.config_loader import AppConfig
from core.quality.service import AnswerQualityService
from database.database import build_session_factory
from .config import get_config


class ServiceManager:
    """Builds the session factory and quality service once, on first request."""

    def __init__(self):
        self._lock = threading.Lock()
        self._session_factory: Optional[sessionmaker] = None
        self._service: Optional[AnswerQualityService] = None

    def get_service(self, config: AppConfig) -> AnswerQualityService:
        if self._service is None:
            with self._lock:
                if self._service is None:
                    self._session_factory = build_session_factory(config.database.url)
                    self._service = AnswerQualityService.build(config, self._session_factory)
        return self._service


# Global service manager instance
_service_manager = ServiceManager()


def get_quality_service(config: AppConfig = Depends(get_config)) -> AnswerQualityService:
    """
    FastAPI dependency that returns the shared AnswerQualityService.

    Usage:
        @router.get("/endpoint")
        def my_endpoint(service: AnswerQualityService = Depends(get_quality_service)):
            ...
    """
    return _service_manager.get_service(config)
