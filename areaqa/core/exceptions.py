"""Custom exception classes."""


class AreaQAException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        detail: str,
        code: str = "AREAQA_ERROR",
    ):
        super().__init__(detail)
        self.detail = detail
        self.code = code


class GeometryConstructionError(AreaQAException):
    def __init__(self, origin_id: int, reason: str):
        self.origin_id = origin_id
        self.reason = reason
        super().__init__(
            detail=f"Cannot build geometry for id {origin_id}: {reason}",
            code="GEOMETRY_ERROR",
        )


class ConfigurationError(AreaQAException):
    def __init__(self, detail: str, code: str = "CONFIGURATION_ERROR"):
        super().__init__(detail=detail, code=code)


class UnknownLayerError(ConfigurationError):
    def __init__(self, label: str):
        self.label = label
        super().__init__(
            detail=f"Undefined references layer {label}",
            code="UNKNOWN_LAYER",
        )


class UnknownPolicyError(ConfigurationError):
    def __init__(self, name: str, available: list[str]):
        self.name = name
        super().__init__(
            detail=f"Unknown policy: {name} (available: {', '.join(available)})",
            code="UNKNOWN_POLICY",
        )


class EngineStateError(AreaQAException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, code="ENGINE_STATE_ERROR")


class SpatialIndexError(AreaQAException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, code="SPATIAL_INDEX_ERROR")


class InputFormatError(AreaQAException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, code="INPUT_FORMAT_ERROR")
