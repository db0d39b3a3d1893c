"""Metrics Route — Prometheus scrape endpoint."""

from fastapi import APIRouter
from fastapi.responses import Response

from app.infrastructure.metrics import render_latest

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics():
    body, content_type = render_latest()
    return Response(content=body, media_type=content_type)
