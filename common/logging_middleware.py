"""Request audit logging and logger setup for the booking desk."""
from __future__ import annotations

import logging
from pathlib import Path
from time import time
from typing import Optional

from fastapi import FastAPI, Request

from .config import get_settings

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(service_name: str) -> logging.Handler:
    log_dir = Path(get_settings().log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{service_name}.log")
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def configure_logging(service_name: str) -> logging.Logger:
    """Attach a file handler to the ``<service>`` logger tree once.

    Module loggers such as ``bookings.repository`` propagate into it.
    """
    logger = logging.getLogger(service_name)
    if logger.handlers:
        return logger

    logger.setLevel(get_settings().log_level.upper())
    logger.addHandler(_file_handler(service_name))
    return logger


def add_audit_middleware(app: FastAPI, service_name: str) -> None:
    logger = configure_logging(service_name).getChild("audit")

    @app.middleware("http")
    async def audit_logger(request: Request, call_next):  # type: ignore[override]
        start = time()
        response = await call_next(request)
        duration_ms = (time() - start) * 1000
        client_ip: Optional[str] = None
        if request.client:
            client_ip = request.client.host
        logger.info(
            "%s %s | status=%s | client=%s | duration=%.2fms",
            request.method,
            request.url.path,
            response.status_code,
            client_ip or "unknown",
            duration_ms,
        )
        return response
