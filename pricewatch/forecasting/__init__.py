"""
Forecasting Module
"""
from .forecast import (
    ForecastResult,
    backtest_accuracy,
    enrich_product,
    ewma,
    forecast,
    forecast_next,
    forecast_next7,
    linear_trend,
    trend_flag,
)

__all__ = [
    "ForecastResult",
    "backtest_accuracy",
    "enrich_product",
    "ewma",
    "forecast",
    "forecast_next",
    "forecast_next7",
    "linear_trend",
    "trend_flag",
]
