from .api_client import DashboardClient, DashboardError
from .views import GraphView, NewsFeed, SentimentView

__all__ = ["DashboardClient", "DashboardError", "GraphView", "NewsFeed", "SentimentView"]
