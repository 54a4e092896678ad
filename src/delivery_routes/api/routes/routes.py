"""Routing endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from ...schemas.routing import CompareRoutesResponse, OptimizeRouteRequest, OptimizeRouteResponse
from ...services.routing.exceptions import ExternalServiceError
from ...services.routing.service import compare_stops, export_stops, optimize_stops

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    try:
        return optimize_stops(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ExternalServiceError as exc:
        logging.warning(f"Directions lookup failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Directions service unavailable: {str(exc)}",
        ) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc


@router.post("/compare", response_model=CompareRoutesResponse, status_code=status.HTTP_200_OK)
def compare(payload: OptimizeRouteRequest) -> CompareRoutesResponse:
    """Optimize the stops and report distances before and after."""
    try:
        return compare_stops(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error comparing routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compare routes: {str(exc)}",
        ) from exc


@router.post("/export", status_code=status.HTTP_200_OK)
def export(
    payload: OptimizeRouteRequest,
    export_format: Literal["json", "csv"] = Query(default="json", alias="format"),
):
    """Optimize the stops and return the ordered route as JSON or CSV."""
    try:
        exported = export_stops(payload, export_format)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error exporting route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export route: {str(exc)}",
        ) from exc
    if export_format == "csv":
        return PlainTextResponse(exported, media_type="text/csv")
    return exported
