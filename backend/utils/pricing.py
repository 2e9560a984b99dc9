import math
from config import settings


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; prices round .5 upwards
    return int(math.floor(value + 0.5))


def shipping_for(total_amount: float) -> float:
    return 0 if total_amount > settings.FREE_SHIPPING_THRESHOLD else settings.SHIPPING_FEE


def tax_for(total_amount: float) -> int:
    return round_half_up(total_amount * settings.TAX_RATE)
