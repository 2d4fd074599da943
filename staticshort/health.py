"""
Liveness probe for the redirect server.
"""
from datetime import datetime, timezone
from typing import Dict, Any


class HealthChecker:
    """
    Health checker for the redirect server.

    Rules are fixed at startup, so a running process is always able to
    serve; liveness is the only probe.
    """

    def __init__(self, service_name: str = "staticshort", version: str = "0.1.0", routes: int = 0):
        self.service_name = service_name
        self.version = version
        self.routes = routes

    def liveness(self) -> Dict[str, Any]:
        """
        Liveness check - basic health check.

        Returns:
            dict: Health status with service info and timestamp
        """
        return {
            "status": "ok",
            "service": self.service_name,
            "version": self.version,
            "routes": self.routes,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
