"""Store settings read from the ``[custom]`` section of ``domain.toml``.

Every accessor falls back to the storefront defaults so the domain works
without any custom configuration.
"""

from pathlib import Path

from storefront.domain import storefront

DEFAULT_SHIPPING_RATES = {"standard": 5.0, "express": 15.0}
DEFAULT_PAYMENT_SUCCESS_RATE = 0.8
DEFAULT_PAYMENT_DELAY_SECONDS = 2.0
DEFAULT_CATALOGUE_PATH = Path(__file__).parent / "catalogue" / "products.json"


def _custom() -> dict:
    return storefront.config.get("custom", None) or {}


def shipping_rates() -> dict[str, float]:
    rates = _custom().get("shipping_rates") or DEFAULT_SHIPPING_RATES
    return {str(method): float(rate) for method, rate in rates.items()}


def payment_success_rate() -> float:
    return float(_custom().get("payment_success_rate", DEFAULT_PAYMENT_SUCCESS_RATE))


def payment_delay_seconds() -> float:
    return float(_custom().get("payment_delay_seconds", DEFAULT_PAYMENT_DELAY_SECONDS))


def catalogue_path() -> Path:
    configured = _custom().get("catalogue_path")
    return Path(configured) if configured else DEFAULT_CATALOGUE_PATH
