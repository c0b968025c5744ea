"""Shared helpers for the route modules: gateway construction and error mapping."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..errors import GatewayUnavailable, UnresolvedAddress
from ..services.geo.geoapify_client import GeoapifyClient

logger = logging.getLogger(__name__)


def get_geo_client() -> GeoapifyClient:
    """Build the geocoding/routing client; an unconfigured key is a server error."""
    try:
        return GeoapifyClient()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


def to_http_error(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, UnresolvedAddress):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "failed_address": exc.address},
        )
    if isinstance(exc, GatewayUnavailable):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logging.exception(f"Error while trying to {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(exc)}",
    )
