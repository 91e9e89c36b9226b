"""
API Dependencies - Service container access for FastAPI endpoints

Pattern:
1. The host builds a ServiceContainer (build_container)
2. create_app(services) stores it with set_service_container()
3. Endpoints receive it through Depends(get_service_container)

Example:
    @router.get("/instances")
    async def list_instances(services: ServiceContainer = Depends(get_service_container)):
        return services.registry.instance_ids()
"""

from typing import Optional

from fastapi import HTTPException, status

from animbind.services.service_container import ServiceContainer

_service_container: Optional[ServiceContainer] = None


def set_service_container(services: Optional[ServiceContainer]) -> None:
    """Store the service container for API access (None clears it)"""
    global _service_container
    _service_container = services


async def get_service_container() -> ServiceContainer:
    """
    FastAPI dependency for accessing service container.

    Raises:
        HTTPException: 503 Service Unavailable if services not initialized
    """
    if _service_container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service container not initialized"
        )
    return _service_container
