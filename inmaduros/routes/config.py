"""GET /api/config: club constants the frontend renders in its forms."""

from fastapi import APIRouter

from inmaduros.constants import PREDEFINED_MEETING_POINTS, ROUTE_LEVELS, ROUTE_PACE_INFO
from inmaduros.schemas.common import DataResponse
from inmaduros.schemas.misc import AppConfigResponse

router = APIRouter(prefix="/api", tags=["Config"])


@router.get(
    "/config",
    response_model=DataResponse[AppConfigResponse],
    summary="Meeting points, paces and levels",
)
async def get_app_config():
    config = AppConfigResponse.model_validate(
        {
            "meeting_points": PREDEFINED_MEETING_POINTS,
            "route_paces": ROUTE_PACE_INFO,
            "route_levels": ROUTE_LEVELS,
        }
    )
    return DataResponse[AppConfigResponse](data=config)
