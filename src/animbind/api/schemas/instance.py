"""
Pydantic schemas for instance and property endpoints.

Property values are free-form JSON: numbers, booleans, strings, colors in any
accepted shape ("#3EC293", "teal", [62, 194, 147], {"r": 62, ...}).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class InstanceSummary(BaseModel):
    """One registered instance"""
    id: str
    property_count: int = Field(description="Top-level properties")
    input_count: int = Field(description="State-machine inputs")
    cached_paths: int = Field(description="Entries in the path cache")
    current_state: Optional[str] = None
    artboards: List[str] = Field(default_factory=list)


class InstanceListResponse(BaseModel):
    instances: List[InstanceSummary]
    count: int


class PropertyNodeResponse(BaseModel):
    """Discovered property, containers include their children"""
    name: str
    path: str
    kind: str
    value: Any = None
    options: Optional[List[str]] = None
    index: Optional[int] = None
    label: Optional[str] = None
    children: Optional[List['PropertyNodeResponse']] = None


class PropertyListResponse(BaseModel):
    instance_id: str
    properties: List[PropertyNodeResponse]


class PropertyValuesResponse(BaseModel):
    instance_id: str
    values: Dict[str, Any]


class PropertyValueResponse(BaseModel):
    instance_id: str
    path: str
    value: Any = None


class PropertyUpdateRequest(BaseModel):
    """New value for a property"""
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"value": "light"}, {"value": "#3EC293"}, {"value": 0.5}]}
    )

    value: Any = Field(..., description="Value in any shape the property kind accepts")


class UpdateResponse(BaseModel):
    instance_id: str
    path: str
    success: bool


class InputResponse(BaseModel):
    name: str
    kind: str
    value: Any = None


class InputListResponse(BaseModel):
    instance_id: str
    inputs: List[InputResponse]


class BoolInputRequest(BaseModel):
    value: bool


class NumberInputRequest(BaseModel):
    value: float


class TextRunRequest(BaseModel):
    """New text for a named text run"""
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"value": "Welcome back"}, {"value": "New", "path": "badge"}]}
    )

    value: str
    path: Optional[str] = Field(None, description="Nested artboard holding the run")


class TextRunResponse(BaseModel):
    instance_id: str
    name: str
    path: Optional[str] = None
    value: Optional[str] = None


class StateResponse(BaseModel):
    instance_id: str
    current_state: Optional[str] = None


class CacheStatsResponse(BaseModel):
    """Registry diagnostics"""
    instance_count: int
    total_cached_paths: int
    instances_with_path_cache: int
    image_assets: int
    font_assets: int
    cached_image_sets: int
    total_cached_images: int
    pending_events: int


class CacheClearResponse(BaseModel):
    cleared: int
