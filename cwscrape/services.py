"""Namespaces that discovery jobs know about, and how ARNs map to dimensions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Pattern


@dataclass(frozen=True)
class ServiceConfig:
    """A CloudWatch namespace supported by discovery jobs.

    ``resource_filters`` are resource type filters for the tagging API.
    ``dimension_regexps`` are patterns whose named groups pull dimension
    values out of a resource ARN; an underscore in a group name stands for
    a space in the dimension name.
    """

    namespace: str
    alias: str
    resource_filters: tuple[str, ...] = ()
    dimension_regexps: tuple[Pattern[str], ...] = field(default=(), compare=False)

    def extract_dimensions(self, arn: str) -> dict[str, str]:
        """Return the dimensions found in ``arn`` by every matching pattern."""
        dimensions: dict[str, str] = {}
        for pattern in self.dimension_regexps:
            match = pattern.search(arn)
            if match is None:
                continue
            for name, value in match.groupdict().items():
                if value is not None:
                    dimensions[name.replace("_", " ")] = value
        return dimensions


def _service(
    namespace: str,
    alias: str,
    filters: Iterable[str] = (),
    regexps: Iterable[str] = (),
) -> ServiceConfig:
    return ServiceConfig(
        namespace=namespace,
        alias=alias,
        resource_filters=tuple(filters),
        dimension_regexps=tuple(re.compile(p) for p in regexps),
    )


SUPPORTED_SERVICES: tuple[ServiceConfig, ...] = (
    _service("CWAgent", "cwagent"),
    _service("AWS/Usage", "usage"),
    _service("AWS/CertificateManager", "acm", ["acm:certificate"]),
    _service(
        "AWS/ACMPrivateCA",
        "acm-pca",
        ["acm-pca:certificate-authority"],
        ["(?P<PrivateCAArn>.*)"],
    ),
    _service("AmazonMWAA", "airflow", ["airflow"]),
    _service("AWS/MWAA", "mwaa"),
    _service(
        "AWS/ApplicationELB",
        "alb",
        ["elasticloadbalancing:loadbalancer/app", "elasticloadbalancing:targetgroup"],
        [":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"],
    ),
    _service("AWS/AppStream", "appstream", ["appstream"], [":fleet/(?P<FleetName>[^/]+)"]),
    _service("AWS/Backup", "backup", ["backup"]),
    _service(
        "AWS/ApiGateway",
        "apigateway",
        ["apigateway"],
        [
            # REST API gateways
            "/restapis/(?P<ApiName>[^/]+)$",
            "/restapis/(?P<ApiName>[^/]+)/stages/(?P<Stage>[^/]+)$",
            # HTTP and websocket gateways
            "/apis/(?P<ApiId>[^/]+)$",
            "/apis/(?P<ApiId>[^/]+)/stages/(?P<Stage>[^/]+)$",
            "/apis/(?P<ApiId>[^/]+)/routes/(?P<Route>[^/]+)$",
        ],
    ),
    _service("AWS/AmazonMQ", "mq", ["mq"], ["broker:(?P<Broker>[^:]+)"]),
    _service("AWS/AppSync", "appsync", ["appsync"], ["apis/(?P<GraphQLAPIId>[^/]+)"]),
    _service("AWS/Athena", "athena", ["athena"], ["workgroup/(?P<WorkGroup>[^/]+)"]),
    _service(
        "AWS/AutoScaling",
        "asg",
        (),
        ["autoScalingGroupName/(?P<AutoScalingGroupName>[^/]+)"],
    ),
    _service("AWS/ElasticBeanstalk", "beanstalk", ["elasticbeanstalk:environment"]),
    _service("AWS/Billing", "billing"),
    _service("AWS/Cassandra", "cassandra", ["cassandra"]),
    _service(
        "AWS/CloudFront",
        "cloudfront",
        ["cloudfront:distribution"],
        ["distribution/(?P<DistributionId>[^/]+)"],
    ),
    _service(
        "AWS/Cognito",
        "cognito-idp",
        ["cognito-idp:userpool"],
        ["userpool/(?P<UserPool>[^/]+)"],
    ),
    _service(
        "AWS/DataSync",
        "datasync",
        ["datasync:task", "datasync:agent"],
        [":task/(?P<TaskId>[^/]+)", ":agent/(?P<AgentId>[^/]+)"],
    ),
    _service(
        "AWS/DMS",
        "dms",
        ["dms"],
        [
            "rep:[^/]+/(?P<ReplicationInstanceIdentifier>[^/]+)",
            "task:(?P<ReplicationTaskIdentifier>[^/]+)/(?P<ReplicationInstanceIdentifier>[^/]+)",
        ],
    ),
    _service("AWS/DDoSProtection", "shield", ["shield:protection"], ["(?P<ResourceArn>.+)"]),
    _service(
        "AWS/DocDB",
        "docdb",
        ["rds:db", "rds:cluster"],
        ["cluster:(?P<DBClusterIdentifier>[^/]+)", "db:(?P<DBInstanceIdentifier>[^/]+)"],
    ),
    _service(
        "AWS/DX",
        "dx",
        ["directconnect"],
        [
            ":dxcon/(?P<ConnectionId>[^/]+)",
            ":dxlag/(?P<LagId>[^/]+)",
            ":dxvif/(?P<VirtualInterfaceId>[^/]+)",
        ],
    ),
    _service("AWS/DynamoDB", "dynamodb", ["dynamodb:table"], [":table/(?P<TableName>[^/]+)"]),
    _service("AWS/EBS", "ebs", ["ec2:volume"], ["volume/(?P<VolumeId>[^/]+)"]),
    _service(
        "AWS/ElastiCache",
        "ec",
        ["elasticache:cluster"],
        ["cluster:(?P<CacheClusterId>[^/]+)"],
    ),
    _service(
        "AWS/MemoryDB",
        "memorydb",
        ["memorydb:cluster"],
        ["cluster/(?P<ClusterName>[^/]+)"],
    ),
    _service("AWS/EC2", "ec2", ["ec2:instance"], ["instance/(?P<InstanceId>[^/]+)"]),
    _service("AWS/EC2Spot", "ec2Spot", (), ["(?P<FleetRequestId>.*)"]),
    _service(
        "AWS/ECS",
        "ecs-svc",
        ["ecs:cluster", "ecs:service"],
        [
            ":cluster/(?P<ClusterName>[^/]+)$",
            ":service/(?P<ClusterName>[^/]+)/(?P<ServiceName>[^/]+)$",
        ],
    ),
    _service(
        "ECS/ContainerInsights",
        "ecs-containerinsights",
        ["ecs:cluster", "ecs:service"],
        [
            ":cluster/(?P<ClusterName>[^/]+)$",
            ":service/(?P<ClusterName>[^/]+)/(?P<ServiceName>[^/]+)$",
        ],
    ),
    _service(
        "AWS/EFS",
        "efs",
        ["elasticfilesystem:file-system"],
        ["file-system/(?P<FileSystemId>[^/]+)"],
    ),
    _service(
        "AWS/ELB",
        "elb",
        ["elasticloadbalancing:loadbalancer"],
        [":loadbalancer/(?P<LoadBalancerName>.+)$"],
    ),
    _service(
        "AWS/ElasticMapReduce",
        "emr",
        ["elasticmapreduce:cluster"],
        ["cluster/(?P<JobFlowId>[^/]+)"],
    ),
    _service(
        "AWS/EMRServerless",
        "emr-serverless",
        ["emr-serverless:applications"],
        ["applications/(?P<ApplicationId>[^/]+)"],
    ),
    _service("AWS/ES", "es", ["es:domain"], [":domain/(?P<DomainName>[^/]+)"]),
    _service(
        "AWS/Firehose",
        "firehose",
        ["firehose"],
        [":deliverystream/(?P<DeliveryStreamName>[^/]+)"],
    ),
    _service("AWS/FSx", "fsx", ["fsx:file-system"], ["file-system/(?P<FileSystemId>[^/]+)"]),
    _service("AWS/GameLift", "gamelift", ["gamelift"], [":fleet/(?P<FleetId>[^/]+)"]),
    _service(
        "AWS/GlobalAccelerator",
        "ga",
        ["globalaccelerator"],
        [
            "accelerator/(?P<Accelerator>[^/]+)$",
            "accelerator/(?P<Accelerator>[^/]+)/listener/(?P<Listener>[^/]+)$",
            "accelerator/(?P<Accelerator>[^/]+)/listener/(?P<Listener>[^/]+)"
            "/endpoint-group/(?P<EndpointGroup>[^/]+)$",
        ],
    ),
    _service("Glue", "glue", ["glue:job"], [":job/(?P<JobName>[^/]+)"]),
    _service(
        "AWS/IoT",
        "iot",
        ["iot:rule", "iot:provisioningtemplate"],
        [":rule/(?P<RuleName>[^/]+)", ":provisioningtemplate/(?P<TemplateName>[^/]+)"],
    ),
    _service("AWS/Kafka", "kafka", ["kafka:cluster"], [":cluster/(?P<Cluster_Name>[^/]+)"]),
    _service(
        "AWS/KafkaConnect",
        "kafkaconnect",
        ["kafka:cluster"],
        [":connector/(?P<Connector_Name>[^/]+)"],
    ),
    _service("AWS/Kinesis", "kinesis", ["kinesis:stream"], [":stream/(?P<StreamName>[^/]+)"]),
    _service(
        "AWS/KinesisAnalytics",
        "kinesis-analytics",
        ["kinesisanalytics:application"],
        [":application/(?P<Application>[^/]+)"],
    ),
    _service("AWS/Lambda", "lambda", ["lambda:function"], [":function:(?P<FunctionName>[^/]+)"]),
    _service(
        "AWS/MediaConnect",
        "mediaconnect",
        ["mediaconnect:flow", "mediaconnect:source", "mediaconnect:output"],
        [
            "^(?P<FlowARN>.*:flow:.*)$",
            "^(?P<SourceARN>.*:source:.*)$",
            "^(?P<OutputARN>.*:output:.*)$",
        ],
    ),
    _service(
        "AWS/MediaConvert",
        "mediaconvert",
        ["mediaconvert"],
        ["(?P<Queue>.*:.*:mediaconvert:.*:queues/.*)$"],
    ),
    _service(
        "AWS/MediaLive",
        "medialive",
        ["medialive:channel"],
        [":channel:(?P<ChannelId>.+)$"],
    ),
    _service(
        "AWS/MediaTailor",
        "mediatailor",
        ["mediatailor:playbackConfiguration"],
        ["playbackConfiguration/(?P<ConfigurationName>[^/]+)"],
    ),
    _service(
        "AWS/Neptune",
        "neptune",
        ["rds:db", "rds:cluster"],
        [":cluster:(?P<DBClusterIdentifier>[^/]+)", ":db:(?P<DBInstanceIdentifier>[^/]+)"],
    ),
    _service(
        "AWS/NetworkFirewall",
        "nfw",
        ["network-firewall:firewall"],
        ["firewall/(?P<FirewallName>[^/]+)"],
    ),
    _service(
        "AWS/NATGateway",
        "ngw",
        ["ec2:natgateway"],
        ["natgateway/(?P<NatGatewayId>[^/]+)"],
    ),
    _service(
        "AWS/NetworkELB",
        "nlb",
        ["elasticloadbalancing:loadbalancer/net", "elasticloadbalancing:targetgroup"],
        [":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"],
    ),
    _service(
        "AWS/PrivateLinkEndpoints",
        "vpc-endpoint",
        ["ec2:vpc-endpoint"],
        [":vpc-endpoint/(?P<VPC_Endpoint_Id>.+)"],
    ),
    _service(
        "AWS/PrivateLinkServices",
        "vpc-endpoint-service",
        ["ec2:vpc-endpoint-service"],
        [":vpc-endpoint-service/(?P<Service_Id>.+)"],
    ),
    _service("AWS/Prometheus", "amp"),
    _service("AWS/QLDB", "qldb", ["qldb"], [":ledger/(?P<LedgerName>[^/]+)"]),
    _service(
        "AWS/RDS",
        "rds",
        ["rds:db", "rds:cluster"],
        [":cluster:(?P<DBClusterIdentifier>[^/]+)", ":db:(?P<DBInstanceIdentifier>[^/]+)"],
    ),
    _service(
        "AWS/Redshift",
        "redshift",
        ["redshift:cluster"],
        [":cluster:(?P<ClusterIdentifier>[^/]+)"],
    ),
    _service(
        "AWS/Route53Resolver",
        "route53-resolver",
        ["route53resolver"],
        [":resolver-endpoint/(?P<EndpointId>[^/]+)"],
    ),
    _service("AWS/Route53", "route53", ["route53"], [":healthcheck/(?P<HealthCheckId>[^/]+)"]),
    _service("AWS/S3", "s3", ["s3"], ["(?P<BucketName>[^:]+)$"]),
    _service("AWS/SES", "ses"),
    _service("AWS/States", "sfn", ["states"], ["(?P<StateMachineArn>.*)"]),
    _service("AWS/SNS", "sns", ["sns"], ["(?P<TopicName>[^:]+)$"]),
    _service("AWS/SQS", "sqs", ["sqs"], ["(?P<QueueName>[^:]+)$"]),
    _service(
        "AWS/StorageGateway",
        "storagegateway",
        ["storagegateway"],
        [
            ":gateway/(?P<GatewayId>[^:]+)$",
            ":share/(?P<ShareId>[^:]+)$",
            "^(?P<GatewayId>[^:/]+)/(?P<GatewayName>[^:]+)$",
        ],
    ),
    _service(
        "AWS/TransitGateway",
        "tgw",
        ["ec2:transit-gateway"],
        [
            ":transit-gateway/(?P<TransitGateway>[^/]+)",
            "(?P<TransitGateway>[^/]+)/(?P<TransitGatewayAttachment>[^/]+)",
        ],
    ),
    _service("AWS/TrustedAdvisor", "trustedadvisor"),
    _service(
        "AWS/VPN",
        "vpn",
        ["ec2:vpn-connection"],
        [":vpn-connection/(?P<VpnId>[^/]+)"],
    ),
    _service(
        "AWS/ClientVPN",
        "clientvpn",
        ["ec2:client-vpn-endpoint"],
        [":client-vpn-endpoint/(?P<Endpoint>[^/]+)"],
    ),
    _service("AWS/WAFV2", "wafv2", ["wafv2"], ["/webacl/(?P<WebACL>[^/]+)"]),
    _service(
        "AWS/WorkSpaces",
        "workspaces",
        ["workspaces:workspace", "workspaces:directory"],
        [":workspace/(?P<WorkspaceId>[^/]+)$", ":directory/(?P<DirectoryId>[^/]+)$"],
    ),
    _service(
        "AWS/AOSS",
        "aoss",
        ["aoss:collection"],
        [":collection/(?P<CollectionId>[^/]+)"],
    ),
    _service(
        "AWS/SageMaker",
        "sagemaker",
        ["sagemaker:endpoint"],
        [":endpoint/(?P<EndpointName>[^/]+)$"],
    ),
    _service(
        "/aws/sagemaker/Endpoints",
        "sagemaker-endpoints",
        ["sagemaker:endpoint"],
        [":endpoint/(?P<EndpointName>[^/]+)$"],
    ),
    _service(
        "/aws/sagemaker/TrainingJobs",
        "sagemaker-training",
        ["sagemaker:training-job"],
    ),
    _service(
        "/aws/sagemaker/ProcessingJobs",
        "sagemaker-processing",
        ["sagemaker:processing-job"],
    ),
    _service(
        "/aws/sagemaker/TransformJobs",
        "sagemaker-transform",
        ["sagemaker:transform-job"],
    ),
    _service(
        "/aws/sagemaker/InferenceRecommendationsJobs",
        "sagemaker-inf-rec",
        ["sagemaker:inference-recommendations-job"],
        [":inference-recommendations-job/(?P<JobName>[^/]+)"],
    ),
    _service(
        "AWS/Sagemaker/ModelBuildingPipeline",
        "sagemaker-model-building-pipeline",
        ["sagemaker:pipeline"],
        [":pipeline/(?P<PipelineName>[^/]+)"],
    ),
    _service("AWS/Bedrock", "bedrock"),
    _service(
        "AWS/Events",
        "event-rule",
        ["events"],
        [":rule/(?P<EventBusName>[^/]+)/(?P<RuleName>[^/]+)$"],
    ),
)


def get_service(service_type: str) -> Optional[ServiceConfig]:
    """Find a supported service by alias or namespace, or return None."""
    return next(
        (
            svc
            for svc in SUPPORTED_SERVICES
            if service_type in (svc.alias, svc.namespace)
        ),
        None,
    )