"""Feature flags, and a way to make them visible to every layer of a scrape."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Iterator, Protocol, runtime_checkable

AWS_SDK_V2 = "aws-sdk-v2"
"""Use the newer AWS client implementation."""

ALWAYS_RETURN_INFO_METRICS = "always-return-info-metrics"
"""Return info metrics even when there are no matching CloudWatch metrics."""


@runtime_checkable
class FeatureFlags(Protocol):
    """Anything that can tell whether a feature flag is enabled."""

    def is_feature_enabled(self, flag: str) -> bool:
        """Return True if ``flag`` is enabled."""
        ...


class NoFeatureFlags:
    """Feature flags with every flag disabled."""

    def is_feature_enabled(self, flag: str) -> bool:
        return False

    def __repr__(self) -> str:
        return "NoFeatureFlags()"


@dataclass
class FeatureFlagSet:
    """A set of enabled feature flags; a flag not in the set is disabled."""

    flags: set[str] = field(default_factory=set)

    def is_feature_enabled(self, flag: str) -> bool:
        return flag in self.flags

    def enable(self, *flags: str) -> None:
        """Enable every flag given."""
        self.flags.update(flags)

    def __contains__(self, flag: object) -> bool:
        return flag in self.flags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.flags))

    def __len__(self) -> int:
        return len(self.flags)


_DEFAULT_FLAGS = NoFeatureFlags()
_current: ContextVar[FeatureFlags] = ContextVar("cwscrape_feature_flags")


@contextmanager
def flags_in_context(flags: FeatureFlags) -> Iterator[FeatureFlags]:
    """Make ``flags`` the current feature flags for the duration of the block."""
    token = _current.set(flags)
    try:
        yield flags
    finally:
        _current.reset(token)


def current_flags() -> FeatureFlags:
    """Return the feature flags in effect, all disabled if none were set."""
    return _current.get(_DEFAULT_FLAGS)