# rssviewer/api/deps.py
from fastapi import Request

from rssviewer.core.config import Settings
from rssviewer.storage.db import PoolSet


def get_pools(request: Request) -> PoolSet:
    """FastAPI dependency: the PoolSet the app was built with."""
    return request.app.state.pools


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
