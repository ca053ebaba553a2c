from .common import ErrorResponse
from .schedule import SchedulePreviewRequest, CutoffResponse

__all__ = ["ErrorResponse", "SchedulePreviewRequest", "CutoffResponse"]
