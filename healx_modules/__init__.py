"""
Heal-x Modules.

Thin orchestration layers over the kernel and engines:
- Budget: multi-year quarterly plans, projections, plan persistence
- Reporting: print-ready, tabular and raw financial reports
"""

from healx_modules import budget, reporting

__all__ = ["budget", "reporting"]
