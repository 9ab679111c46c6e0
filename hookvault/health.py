"""
Health checks for liveness and readiness probes.
"""
import time
from datetime import datetime, timezone
from typing import Dict, Any

import psutil

from .adapters.base import KVStore
from .logging import get_logger

logger = get_logger()


class HealthChecker:
    """
    Health checker for the hookvault service.

    Provides:
    - Liveness checks (is the service running?)
    - Readiness checks (can the store be reached, is memory available?)
    """

    def __init__(self, store: KVStore, service_name: str = "hookvault", version: str = "0.1.0"):
        self.store = store
        self.service_name = service_name
        self.version = version

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def liveness(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "service": self.service_name,
            "version": self.version,
            "timestamp": self._timestamp(),
        }

    async def readiness(self) -> Dict[str, Any]:
        """
        Readiness check.

        The service is not ready when the store is unreachable or available
        memory is below the error threshold.

        Returns:
            dict: Readiness status with detailed check results
        """
        checks = {
            "store": await self._check_store(),
            "memory": self._check_memory(),
        }
        ready = all(check["status"] != "error" for check in checks.values())

        return {
            "status": "ready" if ready else "not_ready",
            "service": self.service_name,
            "version": self.version,
            "timestamp": self._timestamp(),
            "checks": checks,
        }

    async def _check_store(self) -> Dict[str, Any]:
        start = time.time()
        healthy = await self.store.health_check()
        latency_ms = round((time.time() - start) * 1000, 2)
        if not healthy:
            logger.warning("store_health_check_failed", store=type(self.store).__name__)
            return {"status": "error", "backend": type(self.store).__name__}
        return {"status": "ok", "backend": type(self.store).__name__, "latency_ms": latency_ms}

    def _check_memory(self, threshold_mb: float = 50.0) -> Dict[str, Any]:
        """
        Check available memory.

        Args:
            threshold_mb: Minimum available memory in MB (default: 50.0)

        Returns:
            dict: Memory health check result
        """
        try:
            memory = psutil.virtual_memory()
            available_mb = memory.available / (1024**2)

            if available_mb < threshold_mb:
                status = "error"
            elif available_mb < threshold_mb * 2:
                status = "warning"
            else:
                status = "ok"

            return {
                "status": status,
                "available_mb": round(available_mb, 2),
                "total_mb": round(memory.total / (1024**2), 2),
                "used_percent": memory.percent,
            }

        except Exception as e:
            logger.warning("memory_health_check_failed", error=str(e))
            return {
                "status": "error",
                "error": str(e),
            }
