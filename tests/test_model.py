import dataclasses

import pytest

from cwscrape.model import (
    CustomNamespaceJob,
    Dimension,
    DiscoveryJob,
    JobsConfig,
    MetricConfig,
    Role,
    StaticJob,
    Tag,
)


def test_empty_role_is_default():
    assert Role().is_default() is True


@pytest.mark.parametrize(
    "role",
    [
        Role(role_arn="arn:aws:iam::000000000000:role/reader"),
        Role(external_id="external-id"),
        Role(role_arn="arn:aws:iam::000000000000:role/reader", external_id="external-id"),
    ],
)
def test_configured_role_is_not_default(role):
    assert role.is_default() is False


def test_equal_roles_share_a_dict_key():
    arn = "arn:aws:iam::000000000000:role/reader"
    cache = {Role(arn, "x"): "first"}
    cache[Role(arn, "x")] = "second"
    assert list(cache.values()) == ["second"]


def test_tag_and_dimension_are_immutable():
    tag = Tag(key="env", value="prod")
    with pytest.raises(dataclasses.FrozenInstanceError):
        tag.key = "other"  # type: ignore[misc]
    assert tag.key == "env"
    assert tag == Tag(key="env", value="prod")
    dim = Dimension(name="InstanceId", value="i-abc")
    with pytest.raises(dataclasses.FrozenInstanceError):
        dim.value = "i-def"  # type: ignore[misc]
    assert dim.value == "i-abc"
    assert dim == Dimension(name="InstanceId", value="i-abc")


@pytest.mark.parametrize("cls", [DiscoveryJob, StaticJob, CustomNamespaceJob])
def test_jobs_do_not_share_default_lists(cls):
    first = cls()
    second = cls()
    first.regions.append("us-east-1")
    first.metrics.append(MetricConfig(name="CPUUtilization"))
    assert second.regions == []
    assert second.metrics == []


def test_jobs_config_defaults_are_independent():
    cfg = JobsConfig()
    cfg.static_jobs.append(StaticJob(name="static"))
    fresh = JobsConfig()
    assert fresh.static_jobs == []
    assert fresh.discovery_jobs == []
    assert fresh.custom_namespace_jobs == []


def test_metric_config_replace_round_trip():
    metric = MetricConfig(name="CPUUtilization", statistics=["Average"], period=60, length=120)
    changed = dataclasses.replace(metric, period=120)
    assert changed.period == 120
    assert dataclasses.replace(changed, period=60) == metric
    assert metric.nil_to_zero is None