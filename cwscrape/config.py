"""Scrape configuration files: parsing, validation and conversion to jobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from itertools import chain
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml

from cwscrape import model
from cwscrape.services import get_service

SUPPORTED_API_VERSION = "v1alpha1"

_NO_ROLES_MESSAGE = (
    "no IAM roles configured. If the current IAM role is desired, "
    "an empty Role should be configured"
)

_Decoder = Callable[[Any, str, "list[str]", bool], Any]


class ConfigError(ValueError):
    """Raised when a configuration cannot be parsed or is invalid."""


# --- decoding helpers -------------------------------------------------------


def _describe(value: Any) -> str:
    if isinstance(value, bool):
        return f"!!bool `{str(value).lower()}`"
    if isinstance(value, int):
        return f"!!int `{value}`"
    if isinstance(value, float):
        return f"!!float `{value}`"
    if isinstance(value, str):
        return f"!!str `{value}`"
    if isinstance(value, dict):
        return "!!map"
    if isinstance(value, list):
        return "!!seq"
    return type(value).__name__


def _mismatch(path: str, value: Any, expected: str) -> str:
    return f"{path or 'document'}: cannot unmarshal {_describe(value)} into {expected}"


def _unknown(path: str, key: str, type_name: str) -> str:
    where = f"{path}: " if path else ""
    return f"{where}field {key} not found in type {type_name}"


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _as_str(value: Any, path: str, errors: list[str], strict: bool) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    errors.append(_mismatch(path, value, "string"))
    return ""


def _as_int(value: Any, path: str, errors: list[str], strict: bool) -> int:
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    errors.append(_mismatch(path, value, "int64"))
    return 0


def _as_optional_int(
    value: Any, path: str, errors: list[str], strict: bool
) -> Optional[int]:
    return None if value is None else _as_int(value, path, errors, strict)


def _as_bool(value: Any, path: str, errors: list[str], strict: bool) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    errors.append(_mismatch(path, value, "bool"))
    return False


def _as_optional_bool(
    value: Any, path: str, errors: list[str], strict: bool
) -> Optional[bool]:
    return None if value is None else _as_bool(value, path, errors, strict)


def _list_of(item: _Decoder) -> _Decoder:
    def decode(value: Any, path: str, errors: list[str], strict: bool) -> list:
        if value is None:
            return []
        if not isinstance(value, list):
            errors.append(_mismatch(path, value, "sequence"))
            return []
        return [item(v, f"{path}[{i}]", errors, strict) for i, v in enumerate(value)]

    return decode


def _optional_list_of(item: _Decoder) -> _Decoder:
    as_list = _list_of(item)

    def decode(value: Any, path: str, errors: list[str], strict: bool) -> Optional[list]:
        return None if value is None else as_list(value, path, errors, strict)

    return decode


def _as_tag_map(
    value: Any, path: str, errors: list[str], strict: bool
) -> dict[str, list[str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        errors.append(_mismatch(path, value, "map"))
        return {}
    as_list = _list_of(_as_str)
    return {
        str(key): as_list(tags, _join(path, str(key)), errors, strict)
        for key, tags in value.items()
    }


def _decode_object(cls: type, data: Any, path: str, errors: list[str], strict: bool) -> Any:
    if data is None:
        return cls()
    if not isinstance(data, dict):
        errors.append(_mismatch(path, data, cls.__name__))
        return cls()
    known = {f.metadata["yaml"]: f for f in fields(cls) if "yaml" in f.metadata}
    values: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key)
        spec = known.get(key)
        if spec is None:
            if strict:
                errors.append(_unknown(path, key, cls.__name__))
            continue
        values[spec.name] = spec.metadata["decode"](value, _join(path, key), errors, strict)
    return cls(**values)


def _object(cls: type) -> _Decoder:
    def decode(value: Any, path: str, errors: list[str], strict: bool) -> Any:
        return _decode_object(cls, value, path, errors, strict)

    return decode


def _yaml(key: str, decode: _Decoder, **kwargs: Any) -> Any:
    return field(metadata={"yaml": key, "decode": decode}, **kwargs)


def _inherit(own: int, inherited: Optional[int], default: int) -> int:
    if own:
        return own
    if inherited:
        return inherited
    return default


def _inherit_flag(own: Optional[bool], inherited: Optional[bool]) -> bool:
    if own is not None:
        return own
    if inherited is not None:
        return inherited
    return False


# --- configuration file structure -------------------------------------------


@dataclass
class RoleConf:
    """An IAM role as written in the configuration file."""

    role_arn: str = _yaml("roleArn", _as_str, default="")
    external_id: str = _yaml("externalId", _as_str, default="")

    def validate(self, role_idx: int, parent: str) -> None:
        """Raise ConfigError if an external id is given without a role ARN."""
        if not self.role_arn and self.external_id:
            raise ConfigError(
                f"Role [{role_idx}] in {parent}: RoleArn should not be empty"
            )


@dataclass
class TagConf:
    """A tag as written in the configuration file."""

    key: str = _yaml("key", _as_str, default="")
    value: str = _yaml("value", _as_str, default="")


@dataclass
class DimensionConf:
    """A dimension as written in the configuration file."""

    name: str = _yaml("name", _as_str, default="")
    value: str = _yaml("value", _as_str, default="")


@dataclass
class JobLevelMetricFields:
    """Metric settings given on a job, inherited by metrics that lack them."""

    statistics: list[str] = _yaml("statistics", _list_of(_as_str), default_factory=list)
    period: int = _yaml("period", _as_int, default=0)
    length: int = _yaml("length", _as_int, default=0)
    delay: int = _yaml("delay", _as_int, default=0)
    nil_to_zero: Optional[bool] = _yaml("nilToZero", _as_optional_bool, default=None)
    add_cloudwatch_timestamp: Optional[bool] = _yaml(
        "addCloudwatchTimestamp", _as_optional_bool, default=None
    )


@dataclass
class MetricConf:
    """A metric as written in the configuration file."""

    name: str = _yaml("name", _as_str, default="")
    statistics: list[str] = _yaml("statistics", _list_of(_as_str), default_factory=list)
    period: int = _yaml("period", _as_int, default=0)
    length: int = _yaml("length", _as_int, default=0)
    delay: int = _yaml("delay", _as_int, default=0)
    nil_to_zero: Optional[bool] = _yaml("nilToZero", _as_optional_bool, default=None)
    add_cloudwatch_timestamp: Optional[bool] = _yaml(
        "addCloudwatchTimestamp", _as_optional_bool, default=None
    )

    def validate(
        self,
        metric_idx: int,
        parent: str,
        job_fields: Optional[JobLevelMetricFields] = None,
    ) -> None:
        """Check the metric and fill unset settings from the job or defaults."""
        where = f"Metric [{self.name}/{metric_idx}] in {parent}"
        if not self.name:
            raise ConfigError(f"{where}: Name should not be empty")

        statistics = self.statistics
        if not statistics and job_fields is not None:
            if not job_fields.statistics:
                raise ConfigError(f"{where}: Statistics should not be empty")
            statistics = job_fields.statistics

        period = _inherit(
            self.period,
            job_fields.period if job_fields else None,
            model.DEFAULT_PERIOD_SECONDS,
        )
        if period < 1:
            raise ConfigError(f"{where}: Period value should be a positive integer")
        length = _inherit(
            self.length,
            job_fields.length if job_fields else None,
            model.DEFAULT_LENGTH_SECONDS,
        )
        delay = _inherit(
            self.delay,
            job_fields.delay if job_fields else None,
            model.DEFAULT_DELAY_SECONDS,
        )
        nil_to_zero = _inherit_flag(
            self.nil_to_zero, job_fields.nil_to_zero if job_fields else None
        )
        add_timestamp = _inherit_flag(
            self.add_cloudwatch_timestamp,
            job_fields.add_cloudwatch_timestamp if job_fields else None,
        )

        if length < period:
            raise ConfigError(
                f"{where}: length({length}) is smaller than period({period}). "
                "This can cause that the data requested is not ready and generate data gaps"
            )

        self.length = length
        self.period = period
        self.delay = delay
        self.nil_to_zero = nil_to_zero
        self.add_cloudwatch_timestamp = add_timestamp
        self.statistics = list(statistics)


def _validate_roles(roles: list[RoleConf], parent: str) -> None:
    if not roles:
        raise ConfigError(_NO_ROLES_MESSAGE)
    for idx, role in enumerate(roles):
        role.validate(idx, parent)


_roles = _list_of(_object(RoleConf))
_tags = _list_of(_object(TagConf))
_metrics = _list_of(_object(MetricConf))
_strings = _list_of(_as_str)


@dataclass
class DiscoveryJobConf(JobLevelMetricFields):
    """A discovery job as written in the configuration file."""

    regions: list[str] = _yaml("regions", _strings, default_factory=list)
    type: str = _yaml("type", _as_str, default="")
    roles: list[RoleConf] = _yaml("roles", _roles, default_factory=list)
    search_tags: list[TagConf] = _yaml("searchTags", _tags, default_factory=list)
    custom_tags: list[TagConf] = _yaml("customTags", _tags, default_factory=list)
    dimension_name_requirements: list[str] = _yaml(
        "dimensionNameRequirements", _strings, default_factory=list
    )
    metrics: list[MetricConf] = _yaml("metrics", _metrics, default_factory=list)
    rounding_period: Optional[int] = _yaml(
        "roundingPeriod", _as_optional_int, default=None
    )
    recently_active_only: bool = _yaml("recentlyActiveOnly", _as_bool, default=False)

    def validate(self, job_idx: int) -> None:
        """Raise ConfigError if the job is invalid; fill metric defaults."""
        if not self.type:
            raise ConfigError(f"Discovery job [{job_idx}]: Type should not be empty")
        if get_service(self.type) is None:
            raise ConfigError(
                f"Discovery job [{job_idx}]: Service is not in known list!: {self.type}"
            )
        parent = f"Discovery job [{self.type}/{job_idx}]"
        _validate_roles(self.roles, parent)
        if not self.regions:
            raise ConfigError(f"{parent}: Regions should not be empty")
        if not self.metrics:
            raise ConfigError(f"{parent}: Metrics should not be empty")
        for idx, metric in enumerate(self.metrics):
            metric.validate(idx, parent, self)


@dataclass
class StaticJobConf:
    """A static job as written in the configuration file."""

    name: str = _yaml("name", _as_str, default="")
    regions: list[str] = _yaml("regions", _strings, default_factory=list)
    roles: list[RoleConf] = _yaml("roles", _roles, default_factory=list)
    namespace: str = _yaml("namespace", _as_str, default="")
    custom_tags: list[TagConf] = _yaml("customTags", _tags, default_factory=list)
    dimensions: list[DimensionConf] = _yaml(
        "dimensions", _list_of(_object(DimensionConf)), default_factory=list
    )
    metrics: list[MetricConf] = _yaml("metrics", _metrics, default_factory=list)

    def validate(self, job_idx: int) -> None:
        """Raise ConfigError if the job is invalid; fill metric defaults."""
        if not self.name:
            raise ConfigError(f"Static job [{job_idx}]: Name should not be empty")
        parent = f"Static job [{self.name}/{job_idx}]"
        if not self.namespace:
            raise ConfigError(f"{parent}: Namespace should not be empty")
        _validate_roles(self.roles, parent)
        if not self.regions:
            raise ConfigError(f"{parent}: Regions should not be empty")
        for idx, metric in enumerate(self.metrics):
            metric.validate(idx, parent, None)


@dataclass
class CustomNamespaceConf(JobLevelMetricFields):
    """A custom namespace job as written in the configuration file."""

    regions: list[str] = _yaml("regions", _strings, default_factory=list)
    name: str = _yaml("name", _as_str, default="")
    namespace: str = _yaml("namespace", _as_str, default="")
    recently_active_only: bool = _yaml("recentlyActiveOnly", _as_bool, default=False)
    roles: list[RoleConf] = _yaml("roles", _roles, default_factory=list)
    metrics: list[MetricConf] = _yaml("metrics", _metrics, default_factory=list)
    custom_tags: list[TagConf] = _yaml("customTags", _tags, default_factory=list)
    dimension_name_requirements: list[str] = _yaml(
        "dimensionNameRequirements", _strings, default_factory=list
    )
    rounding_period: Optional[int] = _yaml(
        "roundingPeriod", _as_optional_int, default=None
    )

    def validate(self, job_idx: int) -> None:
        """Raise ConfigError if the job is invalid; fill metric defaults."""
        if not self.name:
            raise ConfigError(f"CustomNamespace job [{job_idx}]: Name should not be empty")
        if not self.namespace:
            raise ConfigError(
                f"CustomNamespace job [{job_idx}]: Namespace should not be empty"
            )
        parent = f"CustomNamespace job [{self.namespace}/{job_idx}]"
        _validate_roles(self.roles, parent)
        if not self.regions:
            raise ConfigError(
                f"CustomNamespace job [{self.name}/{job_idx}]: Regions should not be empty"
            )
        if not self.metrics:
            raise ConfigError(
                f"CustomNamespace job [{self.name}/{job_idx}]: Metrics should not be empty"
            )
        for idx, metric in enumerate(self.metrics):
            metric.validate(idx, parent, self)


def _model_roles(roles: list[RoleConf]) -> list[model.Role]:
    return [model.Role(role_arn=r.role_arn, external_id=r.external_id) for r in roles]


def _model_tags(tags: list[TagConf]) -> list[model.Tag]:
    return [model.Tag(key=t.key, value=t.value) for t in tags]


def _model_dimensions(dimensions: list[DimensionConf]) -> list[model.Dimension]:
    return [model.Dimension(name=d.name, value=d.value) for d in dimensions]


def _model_metrics(metrics: list[MetricConf]) -> list[model.MetricConfig]:
    return [
        model.MetricConfig(
            name=m.name,
            statistics=list(m.statistics),
            period=m.period,
            length=m.length,
            delay=m.delay,
            nil_to_zero=m.nil_to_zero,
            add_cloudwatch_timestamp=m.add_cloudwatch_timestamp,
        )
        for m in metrics
    ]


@dataclass
class ScrapeConf:
    """A whole configuration file.

    A job list that is absent from the file is None; one given empty is [].
    """

    api_version: str = ""
    sts_region: str = ""
    exported_tags_on_metrics: dict[str, list[str]] = field(default_factory=dict)
    discovery_jobs: Optional[list[DiscoveryJobConf]] = None
    static: Optional[list[StaticJobConf]] = None
    custom_namespace: Optional[list[CustomNamespaceConf]] = None

    def validate(self) -> model.JobsConfig:
        """Validate every job and return the jobs; raise ConfigError if invalid."""
        if self.discovery_jobs is None and self.static is None and self.custom_namespace is None:
            raise ConfigError(
                "At least 1 Discovery job, 1 Static or one CustomNamespace must be defined"
            )
        for idx, job in enumerate(self.discovery_jobs or ()):
            job.validate(idx)
        for idx, custom in enumerate(self.custom_namespace or ()):
            custom.validate(idx)
        for idx, static in enumerate(self.static or ()):
            static.validate(idx)
        if self.api_version and self.api_version != SUPPORTED_API_VERSION:
            raise ConfigError(f"unknown apiVersion value '{self.api_version}'")
        return self.to_jobs_config()

    def _exported_tags_for(self, service_type: str) -> list[str]:
        if not self.exported_tags_on_metrics:
            return []
        svc = get_service(service_type)
        if svc is None:
            return []
        for key in (svc.namespace, svc.alias):
            if key in self.exported_tags_on_metrics:
                return list(self.exported_tags_on_metrics[key])
        return []

    def to_jobs_config(self) -> model.JobsConfig:
        """Convert the configuration into jobs, without validating it."""
        discovery = [
            model.DiscoveryJob(
                regions=list(job.regions),
                type=job.type,
                roles=_model_roles(job.roles),
                search_tags=_model_tags(job.search_tags),
                custom_tags=_model_tags(job.custom_tags),
                dimension_name_requirements=list(job.dimension_name_requirements),
                metrics=_model_metrics(job.metrics),
                rounding_period=job.rounding_period,
                recently_active_only=job.recently_active_only,
                statistics=list(job.statistics),
                period=job.period,
                length=job.length,
                delay=job.delay,
                nil_to_zero=job.nil_to_zero,
                add_cloudwatch_timestamp=job.add_cloudwatch_timestamp,
                exported_tags_on_metrics=self._exported_tags_for(job.type),
            )
            for job in self.discovery_jobs or ()
        ]
        static = [
            model.StaticJob(
                name=job.name,
                regions=list(job.regions),
                roles=_model_roles(job.roles),
                namespace=job.namespace,
                custom_tags=_model_tags(job.custom_tags),
                dimensions=_model_dimensions(job.dimensions),
                metrics=_model_metrics(job.metrics),
            )
            for job in self.static or ()
        ]
        custom = [
            model.CustomNamespaceJob(
                regions=list(job.regions),
                name=job.name,
                namespace=job.namespace,
                roles=_model_roles(job.roles),
                metrics=_model_metrics(job.metrics),
                custom_tags=_model_tags(job.custom_tags),
                dimension_name_requirements=list(job.dimension_name_requirements),
                rounding_period=job.rounding_period,
                recently_active_only=job.recently_active_only,
                statistics=list(job.statistics),
                period=job.period,
                length=job.length,
                delay=job.delay,
                nil_to_zero=job.nil_to_zero,
                add_cloudwatch_timestamp=job.add_cloudwatch_timestamp,
            )
            for job in self.custom_namespace or ()
        ]
        return model.JobsConfig(
            sts_region=self.sts_region,
            discovery_jobs=discovery,
            static_jobs=static,
            custom_namespace_jobs=custom,
        )


# --- top-level decoding ------------------------------------------------------


def _decode_discovery(
    conf: ScrapeConf, value: Any, errors: list[str], strict: bool
) -> None:
    if value is None:
        return
    if not isinstance(value, dict):
        errors.append(_mismatch("discovery", value, "Discovery"))
        return
    for raw_key, item in value.items():
        key = str(raw_key)
        path = _join("discovery", key)
        if key == "exportedTagsOnMetrics":
            conf.exported_tags_on_metrics = _as_tag_map(item, path, errors, strict)
        elif key == "jobs":
            conf.discovery_jobs = _optional_list_of(_object(DiscoveryJobConf))(
                item, path, errors, strict
            )
        elif strict:
            errors.append(_unknown("discovery", key, "Discovery"))


def _decode_scrape_conf(doc: Any, errors: list[str], strict: bool) -> ScrapeConf:
    conf = ScrapeConf()
    if doc is None:
        return conf
    if not isinstance(doc, dict):
        errors.append(_mismatch("", doc, "ScrapeConf"))
        return conf
    for raw_key, value in doc.items():
        key = str(raw_key)
        if key == "apiVersion":
            conf.api_version = _as_str(value, key, errors, strict)
        elif key == "sts-region":
            conf.sts_region = _as_str(value, key, errors, strict)
        elif key == "discovery":
            _decode_discovery(conf, value, errors, strict)
        elif key == "static":
            conf.static = _optional_list_of(_object(StaticJobConf))(
                value, key, errors, strict
            )
        elif key == "customNamespace":
            conf.custom_namespace = _optional_list_of(_object(CustomNamespaceConf))(
                value, key, errors, strict
            )
        elif strict:
            errors.append(_unknown("", key, "ScrapeConf"))
    return conf


def parse_config(data: Union[str, bytes]) -> ScrapeConf:
    """Parse YAML text into a ScrapeConf; unknown fields are ignored.

    Raises ConfigError on malformed YAML or values of the wrong type.
    """
    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as err:
        raise ConfigError(str(err)) from err
    errors: list[str] = []
    conf = _decode_scrape_conf(doc, errors, strict=False)
    if errors:
        raise ConfigError("yaml: unmarshal errors:\n  " + "\n  ".join(errors))
    return conf


def config_warnings(data: Union[str, bytes]) -> list[str]:
    """Return the problems a strict reading of the YAML text finds."""
    messages: list[str] = []
    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as err:
        messages.append(str(err))
        doc = None
    conf = _decode_scrape_conf(doc, messages, strict=True)
    if not conf.api_version:
        messages.append("missing apiVersion")
    return messages


def load_config(
    path: Union[str, Path], logger: Optional[logging.Logger] = None
) -> model.JobsConfig:
    """Read, check and validate a configuration file, returning its jobs.

    Strict-reading problems are logged as warnings. Jobs without roles use
    the current credentials.
    """
    log = logger or logging.getLogger(__name__)
    data = Path(path).read_bytes()
    conf = parse_config(data)

    warnings = config_warnings(data)
    for message in warnings:
        log.warning("config file syntax error: %s", message)
    if warnings:
        log.warning(
            "Config file error(s) detected: Yace might not work as expected. "
            "Future versions of Yace might fail to run with an invalid config file."
        )

    for job in chain(
        conf.discovery_jobs or (), conf.custom_namespace or (), conf.static or ()
    ):
        if not job.roles:
            job.roles = [RoleConf()]

    return conf.validate()