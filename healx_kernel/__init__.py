"""
Heal-x Kernel

Shared foundations for the financial aggregation and budget planning engine:
- Structured JSON logging
- Typed, coded exceptions
- Injectable clock
- Decimal money coercion
- SQLAlchemy base and engine for plan persistence
"""

__version__ = "0.1.0"
