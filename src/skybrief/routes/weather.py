from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Request

from skybrief.dependencies import ServiceContainer, get_services
from skybrief.routes.dto import CalendarResultSummary, WeatherResponse
from skybrief.utils.location import extract_client_ip

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=WeatherResponse, response_model_exclude_none=True)
async def get_weather(
    request: Request,
    query: str = Query(..., min_length=3),
    client_ip: Optional[str] = Query(None, alias="clientIP"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    services: ServiceContainer = Depends(get_services),
):
    """
    Answer a free-text weather question.

    Flow:
    1. Resolve location and date from the client IP
    2. Synthesize and run the WeatherAPI query
    3. Optionally synthesize and run a calendar action for the session
    4. Return the humanized answer
    """
    ip = client_ip or extract_client_ip(request)
    answer = await services.supervisor.process_query(query, ip, session_id)

    calendar_summary = None
    if answer.calendar_result is not None:
        calendar_summary = CalendarResultSummary(message=answer.calendar_result.message)

    return WeatherResponse(
        location=answer.location,
        forecast=answer.forecast,
        query=answer.query,
        calendar_result=calendar_summary,
    )
