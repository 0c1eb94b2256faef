# rssviewer/api/routers/securities.py
from typing import List

from fastapi import APIRouter, Depends

from rssviewer.api.deps import get_pools
from rssviewer.api.schemas.price import SecurityBar
from rssviewer.storage import dao
from rssviewer.storage.db import PoolSet

router = APIRouter(prefix="/api/securities", tags=["securities"])


@router.get("/{name}", response_model=List[SecurityBar])
async def security_series(name: str, pools: PoolSet = Depends(get_pools)):
    """Full OHLC history for one security, oldest first. Unknown names give []."""
    rows = await dao.security_series(pools.prices, name)
    return [SecurityBar(**r) for r in rows]
