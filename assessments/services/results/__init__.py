from .result_service import (
    AttemptResult,
    Eligibility,
    build_result,
    is_complete,
    retry_eligibility,
)

__all__ = ["AttemptResult", "Eligibility", "build_result", "is_complete", "retry_eligibility"]
