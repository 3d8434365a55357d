"""
Reporting Module

Trainee performance, assessor activity and assessment outcome reports.
"""

from .aggregator import ReportAggregator

__all__ = ["ReportAggregator"]
