"""Validated scrape jobs, as the rest of the scraper consumes them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_PERIOD_SECONDS = 300
DEFAULT_LENGTH_SECONDS = 300
DEFAULT_DELAY_SECONDS = 300


@dataclass(frozen=True)
class Role:
    """An IAM role to assume; the empty role means the current credentials."""

    role_arn: str = ""
    external_id: str = ""

    def is_default(self) -> bool:
        """Return True if this is the empty role, i.e. no role is assumed."""
        return self == Role()


@dataclass(frozen=True)
class Tag:
    """A resource tag."""

    key: str = ""
    value: str = ""


@dataclass(frozen=True)
class Dimension:
    """A CloudWatch dimension."""

    name: str = ""
    value: str = ""


@dataclass
class MetricConfig:
    """A metric to fetch, with its statistics and time window."""

    name: str = ""
    statistics: list[str] = field(default_factory=list)
    period: int = 0
    length: int = 0
    delay: int = 0
    nil_to_zero: Optional[bool] = None
    add_cloudwatch_timestamp: Optional[bool] = None


@dataclass
class DiscoveryJob:
    """A job that discovers tagged resources of one service type."""

    regions: list[str] = field(default_factory=list)
    type: str = ""
    roles: list[Role] = field(default_factory=list)
    search_tags: list[Tag] = field(default_factory=list)
    custom_tags: list[Tag] = field(default_factory=list)
    dimension_name_requirements: list[str] = field(default_factory=list)
    metrics: list[MetricConfig] = field(default_factory=list)
    rounding_period: Optional[int] = None
    recently_active_only: bool = False
    statistics: list[str] = field(default_factory=list)
    period: int = 0
    length: int = 0
    delay: int = 0
    nil_to_zero: Optional[bool] = None
    add_cloudwatch_timestamp: Optional[bool] = None
    exported_tags_on_metrics: list[str] = field(default_factory=list)


@dataclass
class StaticJob:
    """A job that fetches metrics for fixed dimensions."""

    name: str = ""
    regions: list[str] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)
    namespace: str = ""
    custom_tags: list[Tag] = field(default_factory=list)
    dimensions: list[Dimension] = field(default_factory=list)
    metrics: list[MetricConfig] = field(default_factory=list)


@dataclass
class CustomNamespaceJob:
    """A job that fetches metrics from a user-defined namespace."""

    regions: list[str] = field(default_factory=list)
    name: str = ""
    namespace: str = ""
    roles: list[Role] = field(default_factory=list)
    metrics: list[MetricConfig] = field(default_factory=list)
    custom_tags: list[Tag] = field(default_factory=list)
    dimension_name_requirements: list[str] = field(default_factory=list)
    rounding_period: Optional[int] = None
    recently_active_only: bool = False
    statistics: list[str] = field(default_factory=list)
    period: int = 0
    length: int = 0
    delay: int = 0
    nil_to_zero: Optional[bool] = None
    add_cloudwatch_timestamp: Optional[bool] = None


@dataclass
class JobsConfig:
    """Every job of a scrape, plus the region used for STS calls."""

    sts_region: str = ""
    discovery_jobs: list[DiscoveryJob] = field(default_factory=list)
    static_jobs: list[StaticJob] = field(default_factory=list)
    custom_namespace_jobs: list[CustomNamespaceJob] = field(default_factory=list)