"""
Price Forecast Engine

Short-horizon price forecasting for one product's price history:
- EWMA level estimate
- OLS linear trend
- 7-step forecast with optional clamping against the last actual price
- Thresholded trend classification
- Walk-forward backtest accuracy (100 - MAPE)

Label convention: a rising price is "up", a falling price is "down".
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import structlog

from pricewatch.models import EnrichedProductRecord, FinalizedProduct

logger = structlog.get_logger(__name__)


DEFAULT_ALPHA = 0.3
DEFAULT_HORIZON = 7
BACKTEST_WINDOW = 7

# Trend threshold: relative band around the mean, with an absolute floor
RELATIVE_THRESHOLD = 0.005
ABSOLUTE_FLOOR = 500.0
FLOOR_CAP_RATIO = 0.05

# Forecast move (percent) below which the direction is reported flat
DIRECTION_DEADBAND_PCT = 0.5

TREND_UP = "up"
TREND_DOWN = "down"
TREND_FLAT = "flat"


@dataclass
class ForecastResult:
    """Forecast output for one price series"""
    forecast7: List[float] = field(default_factory=list)
    trend: str = TREND_FLAT
    accuracy: Optional[float] = None


def ewma(values: Sequence[float], alpha: float = DEFAULT_ALPHA) -> float:
    """Exponentially weighted moving average seeded at the first value"""
    if len(values) == 0:
        return 0.0
    level = float(values[0])
    for value in values[1:]:
        level = alpha * float(value) + (1 - alpha) * level
    return level


def linear_trend(values: Sequence[float]) -> float:
    """OLS slope of value against a 1-based step index"""
    n = len(values)
    if n < 2:
        return 0.0
    y = np.asarray(values, dtype=float)
    x = np.arange(1, n + 1, dtype=float)
    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    if denominator == 0:
        return 0.0
    return float((n * np.sum(x * y) - np.sum(x) * np.sum(y)) / denominator)


def forecast_next(
    values: Sequence[float],
    horizon: int = DEFAULT_HORIZON,
    alpha: float = DEFAULT_ALPHA,
    clamp: bool = True,
) -> List[float]:
    """
    Forecast the next ``horizon`` prices.

    Each step is level + k * slope floored at zero. With ``clamp`` a falling
    trend never forecasts above the last actual price and a rising trend
    never forecasts below it.
    """
    if len(values) == 0:
        return [0.0] * horizon

    level = ewma(values, alpha)
    slope = linear_trend(values)
    steps = np.arange(1, horizon + 1, dtype=float)
    raw = np.maximum(level + steps * slope, 0.0)

    if clamp:
        last_actual = float(values[-1])
        if slope < 0:
            raw = np.minimum(raw, last_actual)
        elif slope > 0:
            raw = np.maximum(raw, last_actual)

    return [float(v) for v in raw]


def forecast_next7(values: Sequence[float], clamp: bool = True) -> List[float]:
    return forecast_next(values, horizon=DEFAULT_HORIZON, clamp=clamp)


def trend_threshold(values: Sequence[float]) -> float:
    magnitude = abs(float(np.mean(values)))
    floor = min(ABSOLUTE_FLOOR, magnitude * FLOOR_CAP_RATIO)
    return max(magnitude * RELATIVE_THRESHOLD, floor)


def trend_flag(values: Sequence[float]) -> str:
    """Classify a series as "up", "down" or "flat" by its thresholded slope"""
    if len(values) < 2:
        return TREND_FLAT
    slope = linear_trend(values)
    threshold = trend_threshold(values)
    if slope > threshold:
        return TREND_UP
    if slope < -threshold:
        return TREND_DOWN
    return TREND_FLAT


def backtest_accuracy(
    values: Sequence[float],
    alpha: float = DEFAULT_ALPHA,
    clamp: bool = True,
) -> Optional[float]:
    """
    Walk-forward accuracy over the trailing window.

    For each of the last (up to) seven indices, forecast one step from the
    history strictly before it and compare with the actual value.

    Returns:
        100 - MAPE clamped to [0, 100] and rounded to one decimal, or None
        when the series is too short or has no positive actuals
    """
    n = len(values)
    if n < 3:
        return None

    errors = []
    for index in range(max(1, n - BACKTEST_WINDOW), n):
        actual = float(values[index])
        if actual <= 0:
            continue
        predicted = forecast_next(values[:index], horizon=1, alpha=alpha, clamp=clamp)[0]
        errors.append(abs(predicted - actual) / actual)

    if not errors:
        return None

    mape = float(np.mean(errors)) * 100
    return round(min(100.0, max(0.0, 100.0 - mape)), 1)


def forecast(
    values: Sequence[float],
    horizon: int = DEFAULT_HORIZON,
    alpha: float = DEFAULT_ALPHA,
    clamp: bool = True,
) -> ForecastResult:
    """Forecast, classify and backtest one price series"""
    return ForecastResult(
        forecast7=forecast_next(values, horizon=horizon, alpha=alpha, clamp=clamp),
        trend=trend_flag(values),
        accuracy=backtest_accuracy(values, alpha=alpha, clamp=clamp),
    )


def price_change_pct(latest: float, projected: float) -> float:
    if latest <= 0:
        return 0.0
    return round((projected - latest) / latest * 100, 2)


def direction_from_change(change_pct: float) -> str:
    if change_pct >= DIRECTION_DEADBAND_PCT:
        return TREND_UP
    if change_pct <= -DIRECTION_DEADBAND_PCT:
        return TREND_DOWN
    return TREND_FLAT


def enrich_product(
    product: FinalizedProduct,
    horizon: int = DEFAULT_HORIZON,
    alpha: float = DEFAULT_ALPHA,
    clamp: bool = True,
) -> EnrichedProductRecord:
    """Attach forecast, trend and price movement to a finalized product"""
    result = forecast(product.price_series, horizon=horizon, alpha=alpha, clamp=clamp)
    latest = product.latest_price
    change = price_change_pct(latest, result.forecast7[-1]) if result.forecast7 else 0.0
    meta = product.meta

    return EnrichedProductRecord(
        sku=meta.sku,
        name=meta.name,
        brand=meta.brand,
        category=meta.category,
        marketplace=meta.marketplace,
        url=meta.url,
        sold=meta.sold,
        price=latest,
        price_history=list(product.price_series),
        trend=result.trend,
        forecast7=result.forecast7,
        price_change_pct=change,
        direction=direction_from_change(change),
        accuracy=result.accuracy,
    )
