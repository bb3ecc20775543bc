"""
Market data layer for the 0DTE Options Explorer.

Usage:
    from market_data import MarketDataService
    service = MarketDataService(api_key=polygon_key)

    # One bar per day for the volatile-day scan
    daily = service.get_daily_bars("SPY", start, end)

    # Regular-session minute bars for one day
    bars = service.get_session_bars("SPY", day)

    # Headlines for the sidebar
    news = service.get_news("SPY")
"""
from .models import NewsArticle
from .service import MarketDataService

__all__ = ["MarketDataService", "NewsArticle"]
