"""Options that tune how a scrape runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from cwscrape.feature_flags import FeatureFlagSet

DEFAULT_METRICS_PER_QUERY = 500
DEFAULT_LABELS_SNAKE_CASE = False
DEFAULT_TAGGING_API_CONCURRENCY = 5
DEFAULT_CLOUDWATCH_CONCURRENCY_LIMIT = 5


class OptionError(ValueError):
    """Raised when an option is given an invalid value."""


@dataclass
class CloudwatchConcurrency:
    """Concurrency limits for CloudWatch API calls.

    ``single_limit`` applies to all calls together unless
    ``per_api_limit_enabled`` is set, in which case each API has its own.
    """

    single_limit: int = DEFAULT_CLOUDWATCH_CONCURRENCY_LIMIT
    per_api_limit_enabled: bool = False
    list_metrics: int = DEFAULT_CLOUDWATCH_CONCURRENCY_LIMIT
    get_metric_data: int = DEFAULT_CLOUDWATCH_CONCURRENCY_LIMIT
    get_metric_statistics: int = DEFAULT_CLOUDWATCH_CONCURRENCY_LIMIT


@dataclass
class ExporterOptions:
    """Settings for a scrape, starting from the defaults."""

    metrics_per_query: int = DEFAULT_METRICS_PER_QUERY
    labels_snake_case: bool = DEFAULT_LABELS_SNAKE_CASE
    tagging_api_concurrency: int = DEFAULT_TAGGING_API_CONCURRENCY
    feature_flags: FeatureFlagSet = field(default_factory=FeatureFlagSet)
    cloudwatch_concurrency: CloudwatchConcurrency = field(
        default_factory=CloudwatchConcurrency
    )


Option = Callable[[ExporterOptions], None]


def _require_positive(value: int, message: str) -> None:
    if value <= 0:
        raise OptionError(message)


def metrics_per_query(value: int) -> Option:
    """Set how many metrics go into one GetMetricData request."""

    def apply(options: ExporterOptions) -> None:
        _require_positive(value, "MetricsPerQuery must be a positive value")
        options.metrics_per_query = value

    return apply


def labels_snake_case(value: bool) -> Option:
    """Choose whether label names are written in snake case."""

    def apply(options: ExporterOptions) -> None:
        options.labels_snake_case = value

    return apply


def cloudwatch_api_concurrency(max_concurrency: int) -> Option:
    """Set the single concurrency limit shared by all CloudWatch calls."""

    def apply(options: ExporterOptions) -> None:
        _require_positive(
            max_concurrency, "CloudWatchAPIConcurrency must be a positive value"
        )
        options.cloudwatch_concurrency.single_limit = max_concurrency

    return apply


def cloudwatch_per_api_limit_concurrency(
    list_metrics: int, get_metric_data: int, get_metric_statistics: int
) -> Option:
    """Enable separate concurrency limits for each CloudWatch API."""

    def apply(options: ExporterOptions) -> None:
        _require_positive(
            list_metrics, "ListMetrics concurrency limit must be a positive value"
        )
        _require_positive(
            get_metric_data, "GetMetricData concurrency limit must be a positive value"
        )
        _require_positive(
            get_metric_statistics,
            "GetMetricStatistics concurrency limit must be a positive value",
        )
        concurrency = options.cloudwatch_concurrency
        concurrency.per_api_limit_enabled = True
        concurrency.list_metrics = list_metrics
        concurrency.get_metric_data = get_metric_data
        concurrency.get_metric_statistics = get_metric_statistics

    return apply


def tagging_api_concurrency(max_concurrency: int) -> Option:
    """Set the concurrency limit for tagging API calls."""

    def apply(options: ExporterOptions) -> None:
        _require_positive(
            max_concurrency, "TaggingAPIConcurrency must be a positive value"
        )
        options.tagging_api_concurrency = max_concurrency

    return apply


def enable_feature_flag(*flags: str) -> Option:
    """Enable the given feature flags."""

    def apply(options: ExporterOptions) -> None:
        options.feature_flags.enable(*flags)

    return apply


def build_options(*options: Option) -> ExporterOptions:
    """Apply ``options`` in order to the defaults; raise OptionError on a bad value."""
    result = ExporterOptions()
    for option in options:
        option(result)
    return result