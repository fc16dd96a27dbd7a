"""
Currency pair universe and quoting conventions.

Pair names follow OANDA instrument notation (``EUR_USD``). Base prices seed
the synthetic sample generator when no broker connection is available.
"""
from typing import Dict, List


FX_PAIRS: List[str] = [
    'EUR_USD', 'GBP_USD', 'USD_JPY', 'USD_CHF', 'AUD_USD',
    'USD_CAD', 'NZD_USD', 'EUR_GBP', 'EUR_JPY', 'GBP_JPY',
    'EUR_CHF', 'AUD_JPY', 'CAD_JPY', 'CHF_JPY', 'EUR_AUD',
    'EUR_CAD', 'GBP_CHF', 'AUD_CAD', 'AUD_NZD', 'EUR_NZD',
    'GBP_AUD', 'GBP_CAD', 'NZD_JPY', 'EUR_SEK', 'USD_SEK',
]

BASE_PRICES: Dict[str, float] = {
    'EUR_USD': 1.0850, 'GBP_USD': 1.2700, 'USD_JPY': 156.50,
    'USD_CHF': 0.8850, 'AUD_USD': 0.6550, 'USD_CAD': 1.3650,
    'NZD_USD': 0.6050, 'EUR_GBP': 0.8550, 'EUR_JPY': 169.80,
    'GBP_JPY': 198.80, 'EUR_CHF': 0.9650, 'AUD_JPY': 102.50,
    'CAD_JPY': 114.60, 'CHF_JPY': 176.80, 'EUR_AUD': 1.6560,
    'EUR_CAD': 1.4810, 'GBP_CHF': 1.1240, 'AUD_CAD': 0.8940,
    'AUD_NZD': 1.0820, 'EUR_NZD': 1.7920, 'GBP_AUD': 1.9380,
    'GBP_CAD': 1.7330, 'NZD_JPY': 94.70, 'EUR_SEK': 11.45,
    'USD_SEK': 10.55,
}

DEFAULT_BASE_PRICE = 1.0


def normalize_pair(pair: str) -> str:
    """Normalize 'eur/usd', 'EURUSD' or 'eur_usd' to 'EUR_USD'."""
    cleaned = pair.strip().upper().replace('/', '_').replace('-', '_')
    if '_' not in cleaned and len(cleaned) == 6:
        cleaned = f"{cleaned[:3]}_{cleaned[3:]}"
    return cleaned


def is_supported_pair(pair: str) -> bool:
    return normalize_pair(pair) in FX_PAIRS


def get_base_price(pair: str) -> float:
    return BASE_PRICES.get(normalize_pair(pair), DEFAULT_BASE_PRICE)


def price_decimals(pair: str) -> int:
    """Quote precision: JPY crosses trade to 3 decimals, everything else to 5."""
    return 3 if 'JPY' in pair.upper() else 5


def format_price(price: float, pair: str) -> str:
    return f"{price:.{price_decimals(pair)}f}"
