"""
healx_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure engines, the source gateway and
    the budget/reporting modules.  This is the only layer that builds
    database-backed repositories and HTTP sessions from configuration.

Architecture position:
    Services -- top layer, consumed by ``scripts.cli``.

        healx_services/ -> healx_modules/, healx_engines/, healx_ingestion/  (allowed)
        healx_engines/  -> healx_services/                                   (FORBIDDEN)
        healx_kernel/   -> healx_services/                                   (FORBIDDEN)
"""

from healx_services.financial_service import FinancialPlanningService

__all__ = ["FinancialPlanningService"]
