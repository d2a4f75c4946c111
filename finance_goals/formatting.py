"""Formatting utilities for currency and percentages shown on the dashboard."""

from __future__ import annotations

from typing import Union


def format_currency(amount: Union[float, int], include_sign: bool = True, decimals: int = 0) -> str:
    """Format a currency amount with thousands separators.

    Example:
        >>> format_currency(1234.56)
        '$1,235'
        >>> format_currency(1234.56, include_sign=False, decimals=2)
        '1,234.56'
    """
    formatted = f"{amount:,.{decimals}f}"
    if not include_sign:
        return formatted
    if formatted.startswith('-'):
        return f"-${formatted[1:]}"
    return f"${formatted}"


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown doesn't read them as LaTeX delimiters."""
    return text.replace("$", "\\$")


def format_percent(value: float, decimals: int = 0) -> str:
    return f"{value:.{decimals}f}%"
