from utils.constants import CURRENCY_SYMBOL


def format_amount(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format a float the way the totals footer shows it, e.g. '1234.50€'."""
    return f"{amount:.2f}{symbol}"