"""Report queries package."""

from trackly.queries.summary import PeriodSummaryBuilder, describe_period

__all__ = ["PeriodSummaryBuilder", "describe_period"]
