import logging

import pytest

from cwscrape import model
from cwscrape.config import (
    ConfigError,
    CustomNamespaceConf,
    DiscoveryJobConf,
    MetricConf,
    RoleConf,
    ScrapeConf,
    StaticJobConf,
    config_warnings,
    load_config,
    parse_config,
)

GOOD_CONFIGS = {
    "config_test.yml": """
apiVersion: v1alpha1
discovery:
  exportedTagsOnMetrics:
    ec2:
      - Name
  jobs:
    - type: AWS/EC2
      regions: [us-east-1]
      period: 300
      length: 300
      metrics:
        - name: CPUUtilization
          statistics: [Average]
static:
  - name: custom
    namespace: AWS/EC2
    regions: [eu-west-1]
    dimensions:
      - name: InstanceId
        value: i-0000000000000000a
    metrics:
      - name: CPUUtilization
        statistics: [Maximum]
        period: 60
        length: 600
""",
    "empty_rolearn.ok.yml": """
apiVersion: v1alpha1
discovery:
  jobs:
    - type: sqs
      regions: [us-east-1]
      roles:
        - roleArn: ""
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Average]
""",
    "sts_region.ok.yml": """
apiVersion: v1alpha1
sts-region: eu-west-1
discovery:
  jobs:
    - type: sqs
      regions: [us-east-1]
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Average]
""",
    "multiple_roles.ok.yml": """
apiVersion: v1alpha1
discovery:
  jobs:
    - type: sqs
      regions: [us-east-1]
      roles:
        - roleArn: arn:aws:iam::000000000000:role/reader
        - roleArn: arn:aws:iam::000000000000:role/other
          externalId: external-id
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Average]
""",
    "custom_namespace.ok.yml": """
apiVersion: v1alpha1
customNamespace:
  - name: app
    namespace: CustomApp/Metrics
    regions: [us-east-1]
    statistics: [Sum]
    metrics:
      - name: RequestCount
""",
}

_DISCOVERY_WITH_ROLES = """
apiVersion: v1alpha1
discovery:
  jobs:
    - type: sqs
      regions: [us-east-1]
      roles:
{roles}
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Average]
"""

BAD_CONFIGS = [
    (
        "externalid_without_rolearn.bad.yml",
        _DISCOVERY_WITH_ROLES.format(roles="        - externalId: external-id"),
        "RoleArn should not be empty",
    ),
    (
        "externalid_with_empty_rolearn.bad.yml",
        _DISCOVERY_WITH_ROLES.format(
            roles='        - roleArn: ""\n          externalId: external-id'
        ),
        "RoleArn should not be empty",
    ),
    (
        "unknown_version.bad.yml",
        """
apiVersion: invalidVersion
discovery:
  jobs:
    - type: sqs
      regions: [us-east-1]
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Average]
""",
        "unknown apiVersion value 'invalidVersion'",
    ),
    (
        "custom_namespace_without_name.bad.yml",
        """
apiVersion: v1alpha1
customNamespace:
  - namespace: CustomApp/Metrics
    regions: [us-east-1]
    metrics:
      - name: RequestCount
        statistics: [Sum]
""",
        "Name should not be empty",
    ),
    (
        "custom_namespace_without_namespace.bad.yml",
        """
apiVersion: v1alpha1
customNamespace:
  - name: app
    regions: [us-east-1]
    metrics:
      - name: RequestCount
        statistics: [Sum]
""",
        "Namespace should not be empty",
    ),
    (
        "custom_namespace_without_region.bad.yml",
        """
apiVersion: v1alpha1
customNamespace:
  - name: app
    namespace: CustomApp/Metrics
    metrics:
      - name: RequestCount
        statistics: [Sum]
""",
        "Regions should not be empty",
    ),
]


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return path


@pytest.mark.parametrize("name", sorted(GOOD_CONFIGS))
def test_good_configs_load(tmp_path, name):
    jobs = load_config(_write(tmp_path, name, GOOD_CONFIGS[name]))
    total = len(jobs.discovery_jobs) + len(jobs.static_jobs) + len(jobs.custom_namespace_jobs)
    assert total > 0


@pytest.mark.parametrize("name,text,message", BAD_CONFIGS)
def test_bad_configs_fail(tmp_path, name, text, message):
    with pytest.raises(ConfigError) as excinfo:
        load_config(_write(tmp_path, name, text))
    assert message in str(excinfo.value)


def test_validate_without_roles_as_library():
    conf = ScrapeConf(
        api_version="v1alpha1",
        sts_region="us-east-2",
        discovery_jobs=[
            DiscoveryJobConf(
                regions=["us-east-2"],
                type="sqs",
                metrics=[MetricConf(name="NumberOfMessagesSent", statistics=["Average"])],
            )
        ],
    )
    with pytest.raises(ConfigError) as excinfo:
        conf.validate()
    assert str(excinfo.value) == (
        "no IAM roles configured. If the current IAM role is desired, "
        "an empty Role should be configured"
    )


def test_load_uses_current_role_when_none_given(tmp_path):
    jobs = load_config(_write(tmp_path, "c.yml", GOOD_CONFIGS["sts_region.ok.yml"]))
    assert jobs.sts_region == "eu-west-1"
    assert jobs.discovery_jobs[0].roles == [model.Role()]


def test_exported_tags_found_by_alias(tmp_path):
    jobs = load_config(_write(tmp_path, "c.yml", GOOD_CONFIGS["config_test.yml"]))
    assert jobs.discovery_jobs[0].exported_tags_on_metrics == ["Name"]
    static = jobs.static_jobs[0]
    assert static.dimensions == [model.Dimension("InstanceId", "i-0000000000000000a")]
    assert static.metrics[0].statistics == ["Maximum"]


def test_multiple_roles_are_kept(tmp_path):
    jobs = load_config(_write(tmp_path, "c.yml", GOOD_CONFIGS["multiple_roles.ok.yml"]))
    assert jobs.discovery_jobs[0].roles == [
        model.Role("arn:aws:iam::000000000000:role/reader", ""),
        model.Role("arn:aws:iam::000000000000:role/other", "external-id"),
    ]


def test_custom_namespace_metric_inherits_job_statistics(tmp_path):
    jobs = load_config(_write(tmp_path, "c.yml", GOOD_CONFIGS["custom_namespace.ok.yml"]))
    job = jobs.custom_namespace_jobs[0]
    assert job.namespace == "CustomApp/Metrics"
    metric = job.metrics[0]
    assert metric.statistics == ["Sum"]
    assert metric.period == model.DEFAULT_PERIOD_SECONDS
    assert metric.length == model.DEFAULT_LENGTH_SECONDS
    assert metric.delay == model.DEFAULT_DELAY_SECONDS
    assert metric.nil_to_zero is False
    assert metric.add_cloudwatch_timestamp is False


def test_metric_inherits_job_level_fields():
    job = DiscoveryJobConf(
        type="sqs",
        regions=["us-east-1"],
        roles=[RoleConf()],
        statistics=["Sum"],
        period=60,
        length=600,
        nil_to_zero=True,
        metrics=[MetricConf(name="NumberOfMessagesSent")],
    )
    job.validate(0)
    metric = job.metrics[0]
    assert metric.statistics == ["Sum"]
    assert metric.period == 60
    assert metric.length == 600
    assert metric.nil_to_zero is True


def test_metric_without_statistics_in_discovery_job_fails():
    metric = MetricConf(name="CPUUtilization")
    with pytest.raises(ConfigError, match="Statistics should not be empty"):
        metric.validate(0, "Discovery job [ec2/0]", DiscoveryJobConf())


def test_static_metric_without_statistics_is_allowed():
    job = StaticJobConf(
        name="s",
        namespace="AWS/EC2",
        regions=["us-east-1"],
        roles=[RoleConf()],
        metrics=[MetricConf(name="CPUUtilization")],
    )
    job.validate(0)
    assert job.metrics[0].statistics == []
    assert job.metrics[0].period == model.DEFAULT_PERIOD_SECONDS


def test_length_smaller_than_period_fails():
    metric = MetricConf(name="CPUUtilization", statistics=["Average"], period=300, length=60)
    with pytest.raises(ConfigError, match="length\\(60\\) is smaller than period\\(300\\)"):
        metric.validate(0, "Static job [s/0]")


def test_negative_period_fails():
    metric = MetricConf(name="CPUUtilization", statistics=["Average"], period=-5)
    with pytest.raises(ConfigError, match="Period value should be a positive integer"):
        metric.validate(0, "Static job [s/0]")


def test_unknown_service_type_fails():
    job = DiscoveryJobConf(type="not-a-service", regions=["us-east-1"], roles=[RoleConf()])
    with pytest.raises(ConfigError, match="Service is not in known list!: not-a-service"):
        job.validate(3)


def test_empty_type_fails():
    with pytest.raises(ConfigError, match=r"Discovery job \[0\]: Type should not be empty"):
        DiscoveryJobConf().validate(0)


def test_static_without_namespace_fails():
    job = StaticJobConf(name="s", regions=["us-east-1"], roles=[RoleConf()])
    with pytest.raises(ConfigError, match=r"Static job \[s/2\]: Namespace should not be empty"):
        job.validate(2)


def test_custom_namespace_without_metrics_fails():
    job = CustomNamespaceConf(
        name="app", namespace="CustomApp", regions=["us-east-1"], roles=[RoleConf()]
    )
    with pytest.raises(ConfigError, match="Metrics should not be empty"):
        job.validate(0)


def test_config_without_jobs_fails():
    with pytest.raises(ConfigError, match="At least 1 Discovery job"):
        ScrapeConf(api_version="v1alpha1").validate()


def test_empty_job_list_is_not_missing():
    jobs = ScrapeConf(static=[]).validate()
    assert jobs.static_jobs == []


def test_parse_config_rejects_wrong_types():
    text = """
apiVersion: v1alpha1
static:
  - name: s
    namespace: AWS/EC2
    regions: [us-east-1]
    metrics:
      - name: CPUUtilization
        period: soon
"""
    with pytest.raises(ConfigError, match="cannot unmarshal"):
        parse_config(text)


def test_parse_config_rejects_malformed_yaml():
    with pytest.raises(ConfigError):
        parse_config("static: [unclosed")


def test_parse_config_ignores_unknown_fields():
    conf = parse_config("apiVersion: v1alpha1\nunknownField: 1\nstatic: []\n")
    assert conf.api_version == "v1alpha1"
    assert conf.static == []
    assert conf.discovery_jobs is None


def test_config_warnings_for_clean_config_is_empty():
    assert config_warnings(GOOD_CONFIGS["config_test.yml"]) == []


def test_config_warnings_reports_unknown_field_and_missing_version():
    warnings = config_warnings("static: []\nbogus: 1\n")
    assert "missing apiVersion" in warnings
    assert any("bogus" in w for w in warnings)


def test_load_config_logs_warnings(tmp_path, caplog):
    text = GOOD_CONFIGS["sts_region.ok.yml"].replace("apiVersion: v1alpha1\n", "")
    logger = logging.getLogger("cwscrape-config-test")
    with caplog.at_level(logging.WARNING, logger="cwscrape-config-test"):
        jobs = load_config(_write(tmp_path, "c.yml", text), logger)
    assert len(jobs.discovery_jobs) == 1
    assert any("missing apiVersion" in r.getMessage() for r in caplog.records)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yml")