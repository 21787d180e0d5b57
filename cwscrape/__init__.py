"""Scrape configuration, job model, service catalogue, options and feature flags for a CloudWatch metrics exporter."""

__version__ = "0.1.0"

__all__ = ["config", "feature_flags", "model", "options", "services"]