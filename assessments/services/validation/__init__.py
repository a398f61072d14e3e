from .response_validator import ResponseValidator, SHAPE_CHECKS

__all__ = ["ResponseValidator", "SHAPE_CHECKS"]
