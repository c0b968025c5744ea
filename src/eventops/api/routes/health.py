"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_geocoding_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.geo.geoapify_client import check_health as geocoding_health_check
    return geocoding_health_check


@router.get("/health/geocoding", status_code=status.HTTP_200_OK)
async def health_geocoding() -> dict:
    """Check the geocoding provider is reachable with the configured key."""
    try:
        geocoding_health_check = _get_geocoding_health_check()
        status_flag = await geocoding_health_check()
        return {"service": "geocoding", "healthy": status_flag}
    except Exception as e:
        return {"service": "geocoding", "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and order table availability."""
    from ...data.orders_repository import AD_HOC_TABLE, SALES_TABLE
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set EVENTOPS_SUPABASE_URL and EVENTOPS_SUPABASE_KEY environment variables.",
        }

    tables: dict[str, bool] = {}
    for table in (SALES_TABLE, AD_HOC_TABLE):
        try:
            supabase.table(table).select("order_number", count="exact").limit(1).execute()
            tables[table] = True
        except Exception:
            tables[table] = False
    return {
        "configured": True,
        "connected": any(tables.values()),
        "tables": tables,
        "message": "Database connected." if all(tables.values()) else "Database connected but order tables may not exist.",
    }
