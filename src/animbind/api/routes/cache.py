"""
Cache Endpoints - registry-wide path cache statistics and clearing

Kept off /instances so no instance id can shadow them.
"""

from fastapi import APIRouter, Depends

from animbind.api.routes.instances import get_registry
from animbind.api.schemas.instance import CacheClearResponse, CacheStatsResponse
from animbind.services.instance_registry import InstanceRegistry
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)

router = APIRouter(
    prefix="/cache",
    tags=["Cache"],
)


@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(registry: InstanceRegistry = Depends(get_registry)):
    return CacheStatsResponse(**registry.get_cache_stats())


@router.delete("", response_model=CacheClearResponse)
async def clear_all_caches(registry: InstanceRegistry = Depends(get_registry)):
    """Empty every instance's path cache"""
    cleared = registry.clear_all_property_caches()
    log.info("Path caches cleared via API", entries=cleared)
    return CacheClearResponse(cleared=cleared)
