from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from placement.config import Config
from placement.domain.shared.outbox import Outbox

router = APIRouter(tags=["Health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    status: str
    version: str
    mirror_backend: str
    dead_letters: int


@router.get("/health", response_model=HealthResponse)
async def health(config: FromDishka[Config], outbox: FromDishka[Outbox]) -> HealthResponse:
    """Liveness plus the number of dead-lettered deliveries awaiting attention."""
    dead = await outbox.dead_letter_count()
    return HealthResponse(
        status="ok" if dead == 0 else "degraded",
        version=config.server.version,
        mirror_backend=config.mirror.backend,
        dead_letters=dead,
    )
