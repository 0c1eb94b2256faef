# rssviewer/api/routers/health.py
from typing import Dict

from fastapi import APIRouter, Depends

from rssviewer.api.deps import get_pools
from rssviewer.storage.db import PoolSet

# No prefix: the plain /health path sits next to /api/health
router = APIRouter(tags=["health"])


@router.get("/api/health")
def health_api():
    return {"status": "ok"}


@router.get("/health")
def health_plain():
    return {"status": "ok"}


@router.get("/api/health/db")
async def health_db(pools: PoolSet = Depends(get_pools)) -> Dict[str, bool]:
    """SELECT 1 against every pool; always 200, one flag per database."""
    return await pools.probe_all()
