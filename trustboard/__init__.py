"""Flow leaderboard aggregation with Hyperion trust flags and identity linking."""

__version__ = "1.0.0"
