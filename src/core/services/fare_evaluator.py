"""Collapse a fare search into one representative price."""

from core.errors import NoFaresError
from core.models import FareQuote


def lowest_fare(quotes: list[FareQuote]) -> float:
    """Minimum fare across every operator and fare class in ``quotes``.

    Raises NoFaresError for an empty list; callers check for quotes first.
    """
    if not quotes:
        raise NoFaresError()
    return min(quote.fare for quote in quotes)
