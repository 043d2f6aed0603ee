from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from placement.domain.company.command import (
    ReconciliationReport,
    RunReconciliation,
    RunReconciliationHandler,
)

router = APIRouter(prefix="/reconcile", tags=["Reconciliation"], route_class=DishkaRoute)


@router.post("", response_model=ReconciliationReport)
async def run_reconciliation(
    handler: FromDishka[RunReconciliationHandler],
) -> ReconciliationReport:
    """Run a full reconciliation pass now instead of waiting for the schedule."""
    return await handler.run(RunReconciliation())
