"""
Visa Routes Router - Read-only access to the route catalog.

Provides endpoints for:
- Listing visa routes, optionally by category
- Full route definitions including questions and criteria
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from eligibility.catalog import RouteCatalog, VisaCategory
from eligibility.errors import UnknownRouteError
from web.dependencies import get_catalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/visa-routes", tags=["Visa Routes"])


@router.get("")
async def list_visa_routes(
    category: Optional[str] = Query(None, description="Work, Education, Family, Visit or Settlement"),
    catalog: RouteCatalog = Depends(get_catalog),
):
    """List visa routes in display order."""
    if category:
        try:
            routes = catalog.by_category(VisaCategory(category))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown category: {category}")
    else:
        routes = catalog.all()

    return {
        "routes": [route.summary() for route in routes],
        "count": len(routes),
        "categories": [c.value for c in VisaCategory],
    }


@router.get("/{route_id}")
async def get_visa_route(route_id: str, catalog: RouteCatalog = Depends(get_catalog)):
    """Full definition of one visa route."""
    try:
        route = catalog.get(route_id)
    except UnknownRouteError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return route.to_payload()
