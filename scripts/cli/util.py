"""CLI utilities: formatting, logging setup."""

from decimal import Decimal

from healx_kernel.logging_config import configure_logging


def fmt_amount(v, currency: str = "LKR") -> str:
    """Format amount for display (e.g. LKR 1,234.50)."""
    d = Decimal(str(v))
    return f"{currency} {d:,.2f}"


def fmt_pct(v) -> str:
    if v is None:
        return "n/a"
    return f"{Decimal(str(v)):.1f}%"


def setup_logging(level_name: str) -> None:
    """Structured JSON logs to stderr so table output on stdout stays clean."""
    configure_logging(level=level_name)


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    line = "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    print(line)
    print("  ".join("-" * w for w in widths))
    for row in rows:
        print("  ".join(cell.rjust(widths[i]) if i else cell.ljust(widths[i]) for i, cell in enumerate(row)))
