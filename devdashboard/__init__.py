"""DevDashboard — cross-repository lock-file dependency reports."""

__version__ = "0.3.0"
