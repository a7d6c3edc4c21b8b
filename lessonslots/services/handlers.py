"""
Framework-independent request handling for the available-slots endpoint.

Web frameworks only need to pass the query parameters in and write the
returned status code and JSON body out.
"""

import logging
from typing import Any, List, Mapping, Tuple, Union

from ..domain.exceptions import (
    InvalidConfiguration,
    InvalidRequestError,
    LessonNotFoundError,
    LessonSlotsError,
)
from .availability import SlotAvailabilityService

logger = logging.getLogger(__name__)

JsonBody = Union[List[dict], dict]


def handle_available_slots_request(
    service: SlotAvailabilityService,
    params: Mapping[str, Any],
) -> Tuple[int, JsonBody]:
    """
    Answer ``GET ?date=YYYY-MM-DD&lessonId=...``.

    Returns:
        ``(status_code, body)`` where body is the slot list on success and
        ``{"error": message}`` otherwise
    """
    date = params.get("date")
    lesson_id = params.get("lessonId")

    if not date or not lesson_id:
        return 400, {"error": "Date and lessonId are required"}

    try:
        slots = service.find_slots(date, lesson_id)
    except LessonNotFoundError:
        return 404, {"error": "Lesson not found"}
    except (InvalidRequestError, InvalidConfiguration) as exc:
        return 400, {"error": str(exc)}
    except LessonSlotsError as exc:
        logger.error("Failed to calculate available slots: %s", exc)
        return 500, {"error": "Failed to calculate available slots"}
    except Exception:
        logger.exception("Unexpected error while calculating available slots")
        return 500, {"error": "Failed to calculate available slots"}

    return 200, [slot.to_dict() for slot in slots]
