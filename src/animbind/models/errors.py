"""
Error types for the binding layer.

These are raised inside the layer and converted to False/None results at the
registry boundary; the HTTP surface maps them onto JSON error bodies.
"""

from typing import Optional


class AnimBindError(Exception):
    """Base class for binding-layer errors"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class InstanceNotFoundError(AnimBindError):
    """Instance id is not registered"""
    def __init__(self, instance_id: str):
        super().__init__(
            code="INSTANCE_NOT_FOUND",
            message=f"Instance '{instance_id}' not found",
            details={"instance_id": instance_id},
            status_code=404
        )


class PropertyNotFoundError(AnimBindError):
    """Property name or path does not resolve in the instance graph"""
    def __init__(self, instance_id: str, path: str):
        super().__init__(
            code="PROPERTY_NOT_FOUND",
            message=f"Property '{path}' not found in '{instance_id}'",
            details={"instance_id": instance_id, "path": path},
            status_code=404
        )


class InputNotFoundError(AnimBindError):
    """State-machine input is missing or has another kind"""
    def __init__(self, instance_id: str, name: str, expected: str):
        super().__init__(
            code="INPUT_NOT_FOUND",
            message=f"Input '{name}' is not a {expected} input in '{instance_id}'",
            details={"instance_id": instance_id, "input": name, "expected": expected},
            status_code=404
        )


class KindMismatchError(AnimBindError):
    """Supplied value does not fit the property's declared kind"""
    def __init__(self, kind: str, value):
        super().__init__(
            code="KIND_MISMATCH",
            message=f"Value of type {type(value).__name__} cannot be applied to a {kind} property",
            details={"kind": kind, "value_type": type(value).__name__},
            status_code=422
        )


class NativeRejectionError(AnimBindError):
    """The engine's setter refused the value"""
    def __init__(self, path: str, reason: str):
        super().__init__(
            code="NATIVE_REJECTION",
            message=f"Engine rejected value for '{path}': {reason}",
            details={"path": path, "reason": reason},
            status_code=422
        )


class AssetLoadError(AnimBindError):
    """Image/font bytes could not be fetched, read or decoded"""
    def __init__(self, source: str, reason: str):
        super().__init__(
            code="ASSET_LOAD_FAILED",
            message=f"Failed to load asset from {source}: {reason}",
            details={"source": source, "reason": reason},
            status_code=502
        )


class DiscoveryInProgressError(AnimBindError):
    """A discovery pass was started while another one is still running"""
    def __init__(self):
        super().__init__(
            code="DISCOVERY_IN_PROGRESS",
            message="A discovery pass is already running on this discoverer",
            status_code=409
        )


class UpdateRejectedError(AnimBindError):
    """A resolved property refused the update (kind mismatch or engine rejection)"""
    def __init__(self, instance_id: str, path: str):
        super().__init__(
            code="UPDATE_REJECTED",
            message=f"Update of '{path}' in '{instance_id}' was rejected",
            details={"instance_id": instance_id, "path": path},
            status_code=422
        )


class TextRunNotFoundError(AnimBindError):
    """No readable text run under that name (and nested artboard path)"""
    def __init__(self, instance_id: str, name: str, path: Optional[str] = None):
        super().__init__(
            code="TEXT_RUN_NOT_FOUND",
            message=f"Text run '{name}' not found in '{instance_id}'",
            details={"instance_id": instance_id, "name": name, "path": path},
            status_code=404
        )
