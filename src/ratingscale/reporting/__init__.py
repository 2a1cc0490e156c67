"""
Reporting module: posterior summaries and diagnostic plots.

Posterior draws are produced by an external sampling engine; this module
only summarises and visualises them.
"""

from ratingscale.reporting.summary import (
    flag_unconverged,
    parameter_values,
    point_summary,
    recovery_table,
    summarize_draws,
)

__all__ = [
    "flag_unconverged",
    "parameter_values",
    "point_summary",
    "recovery_table",
    "summarize_draws",
]
