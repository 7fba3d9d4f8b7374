"""Alert deduplication, grouping, noise scoring, escalation policies and on-call scheduling."""

__version__ = "0.1.0"