"""QuakeWatch API - FastAPI service for the dashboard front end.

Serves the derived views of the live feed (filtered event list, risk
assessment, statistics, activity analytics) plus a manual refresh
trigger. The views are pulled from a single Monitor that owns the
current snapshot and the alert engine.
"""

import logging
import os
import threading
from datetime import datetime
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from quakewatch.core.event import SeismicEvent
from quakewatch.core.filters import (
    DEFAULT_CRITERIA,
    FilterCriteria,
    SortDirection,
    SortKey,
)
from quakewatch.core.geo import GeoPoint
from quakewatch.core.risk import RiskAssessment
from quakewatch.core.stats import (
    ActivityAnalysis,
    Bucket,
    DailyActivity,
    EventStatistics,
)
from quakewatch.orchestrator import Monitor, RefreshResult
from quakewatch.shell.config_loader import load_config

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="QuakeWatch API",
    description="Filtered events, alerts and risk assessment from the live earthquake feed",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ===== Response Models =====

class EventOut(BaseModel):
    id: str
    magnitude: float
    depth_km: float
    occurred_at: datetime
    latitude: float
    longitude: float
    title: str
    closest_city_name: str
    closest_city_distance_m: float
    epicenter_name: str


class AlertOut(BaseModel):
    event: EventOut
    play_sound: bool
    show_notification: bool
    distance_km: float | None = None
    error: str | None = None


class RefreshOut(BaseModel):
    status: str
    summary: str
    events_fetched: int
    events_new: int
    alerts: list[AlertOut]
    errors: list[str]


# ===== Monitor =====

_monitor: Monitor | None = None
_monitor_lock = threading.Lock()


def get_monitor() -> Monitor:
    """Get or create the process-wide Monitor.

    Creation is locked so every request thread shares one alert engine.
    """
    global _monitor
    if _monitor is None:
        with _monitor_lock:
            if _monitor is None:
                _monitor = Monitor(load_config())
                logger.info("Monitor initialized")
    return _monitor


def _ensure_snapshot(monitor: Monitor) -> None:
    """Fetch a first snapshot if the monitor has never refreshed."""
    if monitor.refreshed_at is None:
        result = monitor.refresh()
        if not result.success:
            logger.warning("Initial refresh failed: %s", "; ".join(result.errors))


# ===== Serialization =====

def _event_to_out(event: SeismicEvent) -> EventOut:
    return EventOut(
        id=event.id,
        magnitude=event.magnitude,
        depth_km=event.depth_km,
        occurred_at=event.occurred_at,
        latitude=event.latitude,
        longitude=event.longitude,
        title=event.title,
        closest_city_name=event.closest_city_name,
        closest_city_distance_m=event.closest_city_distance_m,
        epicenter_name=event.epicenter_name,
    )


def _buckets_to_list(buckets: list[Bucket]) -> list[dict[str, Any]]:
    return [
        {"name": b.name, "count": b.count, "percentage": b.percentage}
        for b in buckets
    ]


def _assessment_to_dict(assessment: RiskAssessment) -> dict[str, Any]:
    factors = assessment.factors
    stats = assessment.statistics
    return {
        "reference_location": {
            "lat": assessment.reference_location.latitude,
            "lng": assessment.reference_location.longitude,
        },
        "assessed_at": assessment.assessed_at.isoformat(),
        "overall_risk": assessment.overall_risk,
        "risk_level": assessment.risk_level.value,
        "factors": {
            "recent_activity": factors.recent_activity,
            "magnitude_trend": factors.magnitude_trend,
            "depth_factor": factors.depth_factor,
            "proximity_factor": factors.proximity_factor,
            "historical_risk": factors.historical_risk,
        },
        "statistics": {
            "last_24h": stats.last_24h,
            "last_7d": stats.last_7d,
            "last_30d": stats.last_30d,
            "nearby": stats.nearby,
            "very_near": stats.very_near,
            "average_nearby_magnitude": round(stats.average_nearby_magnitude, 1),
        },
        "recommendations": [
            {"priority": r.priority, "text": r.text}
            for r in assessment.recommendations
        ],
    }


def _statistics_to_dict(stats: EventStatistics, tz_name: str) -> dict[str, Any]:
    return {
        "timezone": tz_name,
        "total": stats.total,
        "average_magnitude": round(stats.average_magnitude, 2),
        "max_magnitude": stats.max_magnitude,
        "average_depth_km": round(stats.average_depth_km, 1),
        "last_24h": stats.last_24h,
        "by_magnitude": _buckets_to_list(stats.by_magnitude),
        "by_depth": _buckets_to_list(stats.by_depth),
        "by_severity": _buckets_to_list(stats.by_severity),
        "top_cities": _buckets_to_list(stats.top_cities),
        "hourly": stats.hourly,
    }


def _daily_to_dict(point: DailyActivity) -> dict[str, Any]:
    return {
        "date": point.day.isoformat(),
        "count": point.count,
        "average_magnitude": point.average_magnitude,
        "max_magnitude": point.max_magnitude,
    }


def _analysis_to_dict(analysis: ActivityAnalysis, tz_name: str) -> dict[str, Any]:
    return {
        "days": analysis.days,
        "timezone": tz_name,
        "total": analysis.total,
        "previous_total": analysis.previous_total,
        "trend_percent": round(analysis.trend_percent, 1),
        "daily_average": round(analysis.daily_average, 1),
        "average_magnitude": round(analysis.average_magnitude, 2),
        "max_magnitude": analysis.max_magnitude,
        "last_24h": analysis.last_24h,
        "by_level": _buckets_to_list(analysis.by_level),
        "magnitude_ranges": _buckets_to_list(analysis.magnitude_ranges),
        "daily": [_daily_to_dict(p) for p in analysis.daily],
        "recent_significant": [
            _event_to_out(e).model_dump(mode="json") for e in analysis.recent_significant
        ],
    }


def _refresh_to_out(result: RefreshResult) -> RefreshOut:
    return RefreshOut(
        status="success" if result.success else "partial_failure",
        summary=result.summary,
        events_fetched=result.events_fetched,
        events_new=result.events_new,
        alerts=[
            AlertOut(
                event=_event_to_out(a.decision.event),
                play_sound=a.decision.play_sound,
                show_notification=a.decision.show_notification,
                distance_km=a.decision.distance_km,
                error=a.error,
            )
            for a in result.alerts
        ],
        errors=result.errors,
    )


# ===== Endpoints =====

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/events", response_model=list[EventOut])
def get_events(
    min_magnitude: float = Query(default=DEFAULT_CRITERIA.magnitude_range[0]),
    max_magnitude: float = Query(default=DEFAULT_CRITERIA.magnitude_range[1]),
    min_depth: float = Query(default=DEFAULT_CRITERIA.depth_range[0]),
    max_depth: float = Query(default=DEFAULT_CRITERIA.depth_range[1]),
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    q: str = Query(default=""),
    city: list[str] = Query(default=[]),
    sort_key: SortKey = Query(default=DEFAULT_CRITERIA.sort_key),
    sort_direction: SortDirection = Query(default=DEFAULT_CRITERIA.sort_direction),
    limit: int | None = Query(default=None, ge=1),
    monitor: Monitor = Depends(get_monitor),
):
    """Filtered and sorted events from the current snapshot."""
    _ensure_snapshot(monitor)

    criteria = FilterCriteria(
        magnitude_range=(min_magnitude, max_magnitude),
        depth_range=(min_depth, max_depth),
        date_range=(start, end),
        text_query=q,
        cities=frozenset(city),
        sort_key=sort_key,
        sort_direction=sort_direction,
    )

    events = monitor.filtered_events(criteria)
    if limit is not None:
        events = events[:limit]

    return [_event_to_out(e) for e in events]


@app.get("/api/cities")
def get_cities(monitor: Monitor = Depends(get_monitor)):
    """Closest-city names present in the current snapshot."""
    _ensure_snapshot(monitor)
    return {"cities": monitor.cities()}


@app.get("/api/risk")
def get_risk(
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    monitor: Monitor = Depends(get_monitor),
):
    """Risk assessment for a location (the configured one if omitted)."""
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="Provide both lat and lng")

    _ensure_snapshot(monitor)

    location = GeoPoint(lat, lng) if lat is not None else None
    assessment = monitor.assess(location)

    if assessment is None:
        raise HTTPException(
            status_code=400,
            detail="Location required for risk assessment",
        )

    return _assessment_to_dict(assessment)


@app.get("/api/stats")
def get_stats(monitor: Monitor = Depends(get_monitor)):
    """Dashboard statistics for the current snapshot."""
    _ensure_snapshot(monitor)
    return _statistics_to_dict(monitor.statistics(), monitor.config.display_timezone)


@app.get("/api/analytics")
def get_analytics(
    days: int = Query(default=7, ge=1, le=365),
    monitor: Monitor = Depends(get_monitor),
):
    """Activity over the last ``days`` compared with the period before."""
    _ensure_snapshot(monitor)
    return _analysis_to_dict(monitor.analytics(days), monitor.config.display_timezone)


@app.post("/api/refresh", response_model=RefreshOut)
def refresh(monitor: Monitor = Depends(get_monitor)):
    """Run one refresh cycle and return the alerts it produced."""
    result = monitor.refresh()
    logger.info("Manual refresh: %s", result.summary)
    return _refresh_to_out(result)


if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )
