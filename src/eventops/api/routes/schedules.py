"""Day schedule endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool

from ...config import settings
from ...data.orders_repository import load_orders
from ...data.settings_repository import load_scheduling_config
from ...schemas.scheduling import DayScheduleRequest, DayScheduleResponse, ScheduleDatesResponse
from ...services.outputs import day_report_to_json, persist_day_report
from ...services.scheduling import build_day_schedules, dates_with_tasks
from .. import deps

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("/day", response_model=DayScheduleResponse, status_code=status.HTTP_200_OK)
async def day_schedule(payload: DayScheduleRequest) -> DayScheduleResponse:
    """Every team's journey for one day, with conflicts and timeline events.

    A team whose journey cannot be computed is returned with its raw tasks and
    an error; the request itself only fails on configuration or storage errors.
    """
    try:
        config = await run_in_threadpool(load_scheduling_config)
        orders = await run_in_threadpool(load_orders)
        client = deps.get_geo_client()
        report = await build_day_schedules(
            orders,
            payload.date,
            config,
            geocoder=client,
            router=client,
            teams=payload.teams,
            mode=payload.mode or settings.routing_mode,
            timeout=settings.schedule_timeout_seconds,
        )
        body = day_report_to_json(report)
        if payload.persist:
            run_dir = await run_in_threadpool(persist_day_report, report)
            logger.info(f"Persisted schedule for {payload.date} to {run_dir}")
            body["output_path"] = str(run_dir)
    except Exception as exc:
        raise deps.to_http_error(exc, f"build schedules for {payload.date}") from exc
    return DayScheduleResponse.model_validate(body)


@router.get("/dates", response_model=ScheduleDatesResponse, status_code=status.HTTP_200_OK)
def schedule_dates() -> ScheduleDatesResponse:
    try:
        orders = load_orders()
    except Exception as exc:
        raise deps.to_http_error(exc, "list scheduled dates") from exc
    return ScheduleDatesResponse(dates=sorted(dates_with_tasks(orders)))
