# cwscrape

`cwscrape` is the configuration side of a CloudWatch-to-Prometheus exporter.
It provides:

- `cwscrape.services`: a catalogue of the CloudWatch namespaces that discovery jobs support, and the rules for reading dimensions out of resource ARNs.
- `cwscrape.config`: the YAML scrape configuration. It covers parsing, strict-reading warnings, validation, defaults and conversion to jobs.
- `cwscrape.model`: the validated job model (`JobsConfig`, `DiscoveryJob`, `StaticJob`, `CustomNamespaceJob`, `MetricConfig`, `Role`, `Tag`, `Dimension`).
- `cwscrape.options` and `cwscrape.feature_flags`: exporter options and feature flags.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Loading a configuration

```python
import logging
from cwscrape.config import load_config

jobs = load_config("config.yml", logging.getLogger("cwscrape"))
for job in jobs.discovery_jobs:
    print(job.type, job.regions, [m.name for m in job.metrics])
```

`load_config(path, logger=None)` reads the file and performs three steps:

1. It logs a warning for each problem that a strict reading finds: unknown fields, mistyped values and a missing `apiVersion`.
2. It gives any job that has no roles a single empty role, which means the current credentials are used.
3. It validates the configuration and returns a `cwscrape.model.JobsConfig`.

It raises `cwscrape.config.ConfigError` in two cases:

- The YAML is malformed, or a value has the wrong type.
- The configuration is invalid, for example:

```
Discovery job [sqs/0]: Regions should not be empty
```

The steps can also be run separately:

- `parse_config(data)` takes YAML text (`str` or `bytes`) and returns a `ScrapeConf`. Unknown fields are ignored.
- `config_warnings(data)` returns the strict-reading messages as a list of strings.
- `ScrapeConf.validate()` checks every job and returns a `JobsConfig`. A job without roles is rejected here, with a message saying that an empty role should be configured.
- `ScrapeConf.to_jobs_config()` converts without validating.

During validation, metric settings that are left unset are filled in. The job-level setting is used first; otherwise the default applies:

| Setting | Default |
| --- | --- |
| period | 300s |
| length | 300s |
| delay | 300s |
| `nilToZero` | off |
| `addCloudwatchTimestamp` | off |

A metric whose length is smaller than its period is rejected. An `apiVersion` other than `v1alpha1` is rejected too.

A minimal configuration:

```yaml
apiVersion: v1alpha1
discovery:
  exportedTagsOnMetrics:
    AWS/SQS: [Name]
  jobs:
    - type: sqs
      regions: [us-east-1]
      roles:
        - roleArn: arn:aws:iam::111111111111:role/example
      period: 60
      length: 300
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Sum]
```

In `exportedTagsOnMetrics`, the keys may be either a service's namespace or its alias.

## Supported services

```python
from cwscrape.services import SUPPORTED_SERVICES, get_service

svc = get_service("alb")          # lookup by alias or namespace
print(svc.namespace)              # AWS/ApplicationELB
print(svc.resource_filters)       # tagging API resource type filters
print(svc.extract_dimensions(
    "arn:aws:elasticloadbalancing:us-east-1:111111111111:loadbalancer/app/web/0000000000000000"
))                                # {'LoadBalancer': 'app/web/0000000000000000'}
```

`get_service` returns `None` for unknown services. `extract_dimensions` applies every pattern of the service and collects the named groups that match. An underscore in a group name becomes a space in the dimension name.

## Options and feature flags

```python
from cwscrape.options import build_options, metrics_per_query, enable_feature_flag
from cwscrape.feature_flags import AWS_SDK_V2, flags_in_context, current_flags

opts = build_options(metrics_per_query(100), enable_feature_flag(AWS_SDK_V2))
with flags_in_context(opts.feature_flags):
    assert current_flags().is_feature_enabled(AWS_SDK_V2)
```

`build_options` starts from the defaults and applies the options in order:

| Setting | Default |
| --- | --- |
| metrics per query | 500 |
| snake-case labels | off |
| tagging API concurrency | 5 |
| CloudWatch concurrency | a single limit of 5 |

The available options are:

- `metrics_per_query`
- `labels_snake_case`
- `cloudwatch_api_concurrency`
- `cloudwatch_per_api_limit_concurrency`
- `tagging_api_concurrency`
- `enable_feature_flag`

A value that must be positive but is not raises `cwscrape.options.OptionError`.

When no flags have been put in context, `current_flags()` returns a `NoFeatureFlags`, which reports every feature as disabled.

## What this package does not do

`cwscrape` does not talk to AWS. It does not discover resources or fetch CloudWatch metrics. It does not build Prometheus metrics or serve an HTTP endpoint, and it has no command-line program. It only prepares the validated jobs and settings that such an exporter would run.