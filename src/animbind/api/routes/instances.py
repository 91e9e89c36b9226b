"""
Instance Endpoints - HTTP routes for registered animation instances

Routes are thin: they resolve ids and paths up front so the client gets a
precise 404, then call the registry, whose boolean result becomes 422 when
the update itself was refused.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from animbind.api.dependencies import get_service_container
from animbind.api.schemas.instance import (
    BoolInputRequest,
    CacheClearResponse,
    InputListResponse,
    InputResponse,
    InstanceListResponse,
    InstanceSummary,
    NumberInputRequest,
    PropertyListResponse,
    PropertyNodeResponse,
    PropertyUpdateRequest,
    PropertyValueResponse,
    PropertyValuesResponse,
    StateResponse,
    TextRunRequest,
    TextRunResponse,
    UpdateResponse,
)
from animbind.models.enums import InputKind
from animbind.models.errors import (
    InputNotFoundError,
    InstanceNotFoundError,
    PropertyNotFoundError,
    TextRunNotFoundError,
    UpdateRejectedError,
)
from animbind.models.instance import AnimationInstance
from animbind.services.instance_registry import InstanceRegistry
from animbind.services.service_container import ServiceContainer
from animbind.utils.logger import get_logger, LogCategory
from animbind.utils.serialization import Serializer

log = get_logger().for_category(LogCategory.API)

router = APIRouter(
    prefix="/instances",
    tags=["Instances"],
)


async def get_registry(
    services: ServiceContainer = Depends(get_service_container)
) -> InstanceRegistry:
    return services.registry


def _require_instance(registry: InstanceRegistry, instance_id: str) -> AnimationInstance:
    instance = registry.get_instance(instance_id)
    if instance is None:
        raise InstanceNotFoundError(instance_id)
    return instance


def _require_path(registry: InstanceRegistry, instance: AnimationInstance, path: str) -> None:
    if registry.resolver.resolve(instance, path) is None:
        raise PropertyNotFoundError(instance.id, path)


def _summary(instance: AnimationInstance) -> InstanceSummary:
    return InstanceSummary(
        id=instance.id,
        property_count=len(instance.graph),
        input_count=len(instance.inputs),
        cached_paths=len(instance.path_cache),
        current_state=instance.current_state,
        artboards=list(instance.artboards),
    )


# ============================================================================
# Registry-wide
# ============================================================================

@router.get("", response_model=InstanceListResponse)
async def list_instances(registry: InstanceRegistry = Depends(get_registry)):
    """List registered instances"""
    instances = [_summary(registry.get_instance(i)) for i in registry.instance_ids()]
    return InstanceListResponse(instances=instances, count=len(instances))


# ============================================================================
# Single instance
# ============================================================================

@router.get("/{instance_id}", response_model=InstanceSummary)
async def get_instance(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    return _summary(_require_instance(registry, instance_id))


@router.delete("/{instance_id}", status_code=204)
async def deregister_instance(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    """Tear down an instance and release its listeners and assets"""
    if not registry.deregister(instance_id):
        raise InstanceNotFoundError(instance_id)
    log.info("Instance deregistered via API", instance=instance_id)


@router.delete("/{instance_id}/cache", response_model=CacheClearResponse)
async def clear_instance_cache(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    instance = _require_instance(registry, instance_id)
    cleared = len(instance.path_cache)
    registry.clear_property_cache(instance_id)
    return CacheClearResponse(cleared=cleared)


@router.get("/{instance_id}/state", response_model=StateResponse)
async def get_state(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    _require_instance(registry, instance_id)
    return StateResponse(
        instance_id=instance_id,
        current_state=registry.get_current_state_name(instance_id)
    )


# ============================================================================
# Properties
# ============================================================================

@router.get("/{instance_id}/properties", response_model=PropertyListResponse)
async def list_properties(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    """Discovered property graph with current values"""
    _require_instance(registry, instance_id)
    nodes = Serializer.graph_to_list(registry.get_properties(instance_id))
    return PropertyListResponse(
        instance_id=instance_id,
        properties=[PropertyNodeResponse(**node) for node in nodes]
    )


@router.get("/{instance_id}/values", response_model=PropertyValuesResponse)
async def get_values(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    _require_instance(registry, instance_id)
    values = registry.get_all_property_values(instance_id)
    return PropertyValuesResponse(instance_id=instance_id, values=Serializer.value_to_json(values))


@router.get("/{instance_id}/properties/{path:path}", response_model=PropertyValueResponse)
async def get_property(instance_id: str, path: str, registry: InstanceRegistry = Depends(get_registry)):
    """Value of a property addressed by '/' or '.' path"""
    instance = _require_instance(registry, instance_id)
    _require_path(registry, instance, path)
    value = registry.get_nested_property_value(instance_id, path)
    return PropertyValueResponse(instance_id=instance_id, path=path,
                                 value=Serializer.value_to_json(value))


@router.put("/{instance_id}/properties/{path:path}", response_model=UpdateResponse)
async def update_property(
    instance_id: str,
    path: str,
    request: PropertyUpdateRequest,
    registry: InstanceRegistry = Depends(get_registry)
):
    """
    Set a property.

    Image and font properties accept an http(s) URL or a local file path,
    which is fetched and decoded before the update.
    """
    instance = _require_instance(registry, instance_id)
    _require_path(registry, instance, path)

    if not await registry.update_nested_property_async(instance_id, path, request.value):
        raise UpdateRejectedError(instance_id, path)
    return UpdateResponse(instance_id=instance_id, path=path, success=True)


# ============================================================================
# State-machine inputs
# ============================================================================

def _require_input(instance: AnimationInstance, name: str, kind: InputKind) -> None:
    binding = instance.inputs.get(name)
    if binding is None or binding.kind != kind:
        raise InputNotFoundError(instance.id, name, kind.value)


@router.get("/{instance_id}/inputs", response_model=InputListResponse)
async def list_inputs(instance_id: str, registry: InstanceRegistry = Depends(get_registry)):
    _require_instance(registry, instance_id)
    inputs = [InputResponse(**binding.to_dict()) for binding in registry.get_inputs(instance_id)]
    return InputListResponse(instance_id=instance_id, inputs=inputs)


@router.post("/{instance_id}/inputs/{name}/trigger", response_model=UpdateResponse)
async def fire_trigger(instance_id: str, name: str, registry: InstanceRegistry = Depends(get_registry)):
    _require_input(_require_instance(registry, instance_id), name, InputKind.TRIGGER)
    if not registry.trigger_input(instance_id, name):
        raise UpdateRejectedError(instance_id, name)
    return UpdateResponse(instance_id=instance_id, path=name, success=True)


@router.put("/{instance_id}/inputs/{name}/bool", response_model=UpdateResponse)
async def set_bool_input(
    instance_id: str,
    name: str,
    request: BoolInputRequest,
    registry: InstanceRegistry = Depends(get_registry)
):
    _require_input(_require_instance(registry, instance_id), name, InputKind.BOOLEAN)
    if not registry.update_bool(instance_id, name, request.value):
        raise UpdateRejectedError(instance_id, name)
    return UpdateResponse(instance_id=instance_id, path=name, success=True)


@router.put("/{instance_id}/inputs/{name}/number", response_model=UpdateResponse)
async def set_number_input(
    instance_id: str,
    name: str,
    request: NumberInputRequest,
    registry: InstanceRegistry = Depends(get_registry)
):
    _require_input(_require_instance(registry, instance_id), name, InputKind.NUMBER)
    if not registry.update_number(instance_id, name, request.value):
        raise UpdateRejectedError(instance_id, name)
    return UpdateResponse(instance_id=instance_id, path=name, success=True)


# ============================================================================
# Text runs
# ============================================================================

@router.get("/{instance_id}/text/{name}", response_model=TextRunResponse)
async def get_text_run(
    instance_id: str,
    name: str,
    path: Optional[str] = None,
    registry: InstanceRegistry = Depends(get_registry)
):
    _require_instance(registry, instance_id)
    value = registry.get_text_run_value(instance_id, name, path=path)
    if value is None:
        raise TextRunNotFoundError(instance_id, name, path)
    return TextRunResponse(instance_id=instance_id, name=name, path=path, value=value)


@router.put("/{instance_id}/text/{name}", response_model=UpdateResponse)
async def set_text_run(
    instance_id: str,
    name: str,
    request: TextRunRequest,
    registry: InstanceRegistry = Depends(get_registry)
):
    _require_instance(registry, instance_id)
    if not registry.set_text_run_value(instance_id, name, request.value, path=request.path):
        raise UpdateRejectedError(instance_id, name)
    return UpdateResponse(instance_id=instance_id, path=name, success=True)
