"""API routes."""

from punch_payroll.api.routes.health import router as health_router
from punch_payroll.api.routes.periods import router as periods_router

__all__ = ["health_router", "periods_router"]
