# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
CloudWatch namespaces that can be enriched with resource tags.

Each service lists the Resource Groups Tagging API resource type filters used to
discover its resources, and the regular expressions that extract CloudWatch
dimension values from a resource ARN. The named groups of every expression are
CloudWatch dimension names.
"""
import re
from typing import Dict, List, Optional, Pattern, Sequence


class ServiceConfig:
    def __init__(
        self,
        namespace: str,
        alias: str,
        resource_filters: Sequence[str] = (),
        dimension_regexps: Sequence[str] = (),
    ):
        self.namespace = namespace
        self.alias = alias
        self.resource_filters: List[str] = list(resource_filters)
        self.dimension_regexps: List[Pattern] = [re.compile(regexp) for regexp in dimension_regexps]

    def __repr__(self) -> str:
        return f"ServiceConfig(namespace={self.namespace!r}, alias={self.alias!r})"


_SUPPORTED_SERVICES: List[ServiceConfig] = [
    # Namespaces without taggable resources list no filters
    ServiceConfig("CWAgent", "cwagent"),
    ServiceConfig("AWS/Usage", "usage"),
    ServiceConfig(
        "AWS/CertificateManager",
        "acm",
        ["acm:certificate"],
        ["(?P<CertificateArn>.*)"],
    ),
    ServiceConfig(
        "AWS/ACMPrivateCA",
        "acm-pca",
        ["acm-pca:certificate-authority"],
        ["(?P<PrivateCAArn>.*)"],
    ),
    ServiceConfig("AmazonMWAA", "airflow", ["airflow"]),
    ServiceConfig("AWS/MWAA", "mwaa"),
    ServiceConfig(
        "AWS/ApplicationELB",
        "alb",
        ["elasticloadbalancing:loadbalancer/app", "elasticloadbalancing:targetgroup"],
        [":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"],
    ),
    ServiceConfig(
        "AWS/AppStream",
        "appstream",
        ["appstream"],
        [":fleet/(?P<FleetName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Backup",
        "backup",
        ["backup"],
        [":backup-vault:(?P<BackupVaultName>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/ApiGateway",
        "apigateway",
        ["apigateway"],
        [
            "/apis/(?P<ApiId>[^/]+)$",
            "/apis/(?P<ApiId>[^/]+)/stages/(?P<Stage>[^/]+)$",
            "/apis/(?P<ApiId>[^/]+)/routes/(?P<Route>[^/]+)$",
            "/restapis/(?P<ApiName>[^/]+)$",
            "/restapis/(?P<ApiName>[^/]+)/stages/(?P<Stage>[^/]+)$",
        ],
    ),
    ServiceConfig(
        "AWS/AmazonMQ",
        "mq",
        ["mq"],
        ["broker:(?P<Broker>[^:]+)"],
    ),
    ServiceConfig(
        "AWS/AppRunner",
        "apprunner",
        ["apprunner"],
        [":service/(?P<ServiceName>[^/]+)/(?P<ServiceID>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/AppSync",
        "appsync",
        ["appsync"],
        ["apis/(?P<GraphQLAPIId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Athena",
        "athena",
        ["athena"],
        ["workgroup/(?P<WorkGroup>[^/]+)"],
    ),
    # Auto Scaling groups are not listed by the tagging API
    ServiceConfig(
        "AWS/AutoScaling",
        "asg",
        [],
        ["autoScalingGroupName/(?P<AutoScalingGroupName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/ElasticBeanstalk",
        "beanstalk",
        ["elasticbeanstalk:environment"],
        ["environment/(?P<ApplicationName>[^/]+)/(?P<EnvironmentName>[^/]+)"],
    ),
    ServiceConfig("AWS/Billing", "billing"),
    ServiceConfig(
        "AWS/Cassandra",
        "cassandra",
        ["cassandra"],
        ["keyspace/(?P<Keyspace>[^/]+)/table/(?P<TableName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/CloudFront",
        "cloudfront",
        ["cloudfront:distribution"],
        ["distribution/(?P<DistributionId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/CodeBuild",
        "codebuild",
        ["codebuild:project"],
        [":project/(?P<ProjectName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Cognito",
        "cognito-idp",
        ["cognito-idp:userpool"],
        ["userpool/(?P<UserPool>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/DataSync",
        "datasync",
        ["datasync:task", "datasync:agent"],
        [":task/(?P<TaskId>[^/]+)", ":agent/(?P<AgentId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/DDoSProtection",
        "shield",
        ["shield:protection"],
        ["(?P<ResourceArn>.+)"],
    ),
    ServiceConfig(
        "AWS/DMS",
        "dms",
        ["dms"],
        ["rep:(?P<ReplicationInstanceIdentifier>[^/]+)", "task:(?P<ReplicationTaskIdentifier>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/DX",
        "directconnect",
        ["directconnect"],
        [":dxcon/(?P<ConnectionId>[^/]+)", ":dxlag/(?P<LagId>[^/]+)", ":dxvif/(?P<VirtualInterfaceId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/DocDB",
        "docdb",
        ["rds:db", "rds:cluster"],
        ["cluster:(?P<DBClusterIdentifier>[^/]+)", "db:(?P<DBInstanceIdentifier>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/DynamoDB",
        "dynamodb",
        ["dynamodb:table"],
        [":table/(?P<TableName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/EBS",
        "ebs",
        ["ec2:volume"],
        ["volume/(?P<VolumeId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/ElastiCache",
        "ec",
        ["elasticache:cluster", "elasticache:serverlesscache"],
        ["cluster:(?P<CacheClusterId>[^/]+)", "serverlesscache:(?P<clusterId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/MemoryDB",
        "memorydb",
        ["memorydb:cluster"],
        ["cluster/(?P<ClusterName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/EC2",
        "ec2",
        ["ec2:instance"],
        ["instance/(?P<InstanceId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/EC2Spot",
        "ec2Spot",
        ["ec2:spot-fleet-request"],
        ["(?P<FleetRequestId>.*)"],
    ),
    ServiceConfig(
        "AWS/EC2CapacityReservations",
        "ec2CapacityReservations",
        ["ec2:capacity-reservation"],
        [":capacity-reservation/(?P<CapacityReservationId>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/ECR",
        "ecr",
        ["ecr:repository"],
        [":repository/(?P<RepositoryName>.+)$"],
    ),
    ServiceConfig(
        "AWS/ECS",
        "ecs-svc",
        ["ecs:cluster", "ecs:service"],
        [":cluster/(?P<ClusterName>[^/]+)$", ":service/(?P<ClusterName>[^/]+)/(?P<ServiceName>[^/]+)$"],
    ),
    ServiceConfig(
        "ECS/ContainerInsights",
        "ecs-containerinsights",
        ["ecs:cluster", "ecs:service"],
        [":cluster/(?P<ClusterName>[^/]+)$", ":service/(?P<ClusterName>[^/]+)/(?P<ServiceName>[^/]+)$"],
    ),
    ServiceConfig(
        "ContainerInsights",
        "containerinsights",
        ["eks:cluster"],
        [":cluster/(?P<ClusterName>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/EFS",
        "efs",
        ["elasticfilesystem:file-system"],
        ["file-system/(?P<FileSystemId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/EKS",
        "eks",
        ["eks:cluster"],
        [":cluster/(?P<ClusterName>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/ELB",
        "elb",
        ["elasticloadbalancing:loadbalancer"],
        [":loadbalancer/(?P<LoadBalancerName>.+)$"],
    ),
    ServiceConfig(
        "AWS/ElasticMapReduce",
        "emr",
        ["elasticmapreduce:cluster"],
        ["cluster/(?P<JobFlowId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/EMRServerless",
        "emr-serverless",
        ["emr-serverless:applications"],
        ["applications/(?P<ApplicationId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/ES",
        "es",
        ["es:domain"],
        [":domain/(?P<DomainName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/AOSS",
        "aoss",
        ["aoss:collection"],
        [":collection/(?P<CollectionId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Events",
        "event-rule",
        ["events"],
        [":rule/(?P<EventBusName>[^/]+)/(?P<RuleName>[^/]+)$", ":rule/(?P<RuleName>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/Firehose",
        "firehose",
        ["firehose"],
        [":deliverystream/(?P<DeliveryStreamName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/FSx",
        "fsx",
        ["fsx:file-system"],
        ["file-system/(?P<FileSystemId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/GameLift",
        "gamelift",
        ["gamelift"],
        [":fleet/(?P<FleetId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/GatewayELB",
        "gwlb",
        ["elasticloadbalancing:loadbalancer/gwy", "elasticloadbalancing:targetgroup"],
        [":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"],
    ),
    ServiceConfig(
        "AWS/GlobalAccelerator",
        "ga",
        ["globalaccelerator"],
        [
            "accelerator/(?P<Accelerator>[^/]+)$",
            "accelerator/(?P<Accelerator>[^/]+)/listener/(?P<Listener>[^/]+)$",
            "accelerator/(?P<Accelerator>[^/]+)/listener/(?P<Listener>[^/]+)/endpoint-group/(?P<EndpointGroup>[^/]+)$",
        ],
    ),
    ServiceConfig(
        "Glue",
        "glue",
        ["glue:job"],
        [":job/(?P<JobName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/IoT",
        "iot",
        ["iot:rule", "iot:provisioningtemplate"],
        [":rule/(?P<RuleName>[^/]+)", ":provisioningtemplate/(?P<TemplateName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/IPAM",
        "ipam",
        ["ec2:ipam-pool"],
        [":ipam-pool/(?P<IpamPoolId>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/Kafka",
        "kafka",
        ["kafka:cluster"],
        [":cluster/(?P<Cluster_Name>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/KafkaConnect",
        "kafkaconnect",
        ["kafka"],
        [":connector/(?P<Connector_Name>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Kinesis",
        "kinesis",
        ["kinesis:stream"],
        [":stream/(?P<StreamName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/KinesisAnalytics",
        "kinesis-analytics",
        ["kinesisanalytics:application"],
        [":application/(?P<Application>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/KMS",
        "kms",
        ["kms:key"],
        [":key/(?P<KeyId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Lambda",
        "lambda",
        ["lambda:function"],
        [":function:(?P<FunctionName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Logs",
        "logs",
        ["logs:log-group"],
        [":log-group:(?P<LogGroupName>.+)"],
    ),
    ServiceConfig(
        "AWS/MediaConnect",
        "mediaconnect",
        ["mediaconnect:flow", "mediaconnect:source", "mediaconnect:output"],
        ["^(?P<FlowARN>.*:flow:.*)$", "^(?P<SourceARN>.*:source:.*)$", "^(?P<OutputARN>.*:output:.*)$"],
    ),
    ServiceConfig(
        "AWS/MediaConvert",
        "mediaconvert",
        ["mediaconvert"],
        ["(?P<Queue>.*:.*:mediaconvert:.*:queues/.*)$"],
    ),
    ServiceConfig(
        "AWS/MediaPackage",
        "mediapackage",
        ["mediapackage", "mediapackagev2", "mediapackage-vod"],
        [":channels/(?P<IngestEndpoint>.+)$", ":packaging-configurations/(?P<PackagingConfiguration>.+)$"],
    ),
    ServiceConfig(
        "AWS/MediaLive",
        "medialive",
        ["medialive:channel"],
        [":channel:(?P<ChannelId>.+)$"],
    ),
    ServiceConfig(
        "AWS/MediaTailor",
        "mediatailor",
        ["mediatailor:playbackConfiguration"],
        ["playbackConfiguration/(?P<ConfigurationName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/NATGateway",
        "nat",
        ["ec2:natgateway"],
        ["natgateway/(?P<NatGatewayId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Neptune",
        "neptune",
        ["rds:db", "rds:cluster"],
        [":cluster:(?P<DBClusterIdentifier>[^/]+)", ":db:(?P<DBInstanceIdentifier>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/NetworkELB",
        "nlb",
        ["elasticloadbalancing:loadbalancer/net", "elasticloadbalancing:targetgroup"],
        [":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"],
    ),
    ServiceConfig(
        "AWS/NetworkFirewall",
        "nfw",
        ["network-firewall:firewall"],
        ["firewall/(?P<FirewallName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Network Manager",
        "networkmanager",
        ["networkmanager:core-network"],
        [":core-network/(?P<CoreNetwork>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/PrivateLinkEndpoints",
        "vpc-endpoint",
        ["ec2:vpc-endpoint"],
        [":vpc-endpoint/(?P<VPC_Endpoint_Id>.+)"],
    ),
    ServiceConfig(
        "AWS/PrivateLinkServices",
        "vpc-endpoint-service",
        ["ec2:vpc-endpoint-service"],
        [":vpc-endpoint-service/(?P<Service_Id>.+)"],
    ),
    ServiceConfig("AWS/Prometheus", "amp"),
    ServiceConfig(
        "AWS/QLDB",
        "qldb",
        ["qldb"],
        [":ledger/(?P<LedgerName>[^/]+)"],
    ),
    ServiceConfig("AWS/QuickSight", "quicksight"),
    ServiceConfig(
        "AWS/RDS",
        "rds",
        ["rds:db", "rds:cluster"],
        [":cluster:(?P<DBClusterIdentifier>[^/]+)", ":db:(?P<DBInstanceIdentifier>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Redshift",
        "redshift",
        ["redshift:cluster"],
        [":cluster:(?P<ClusterIdentifier>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Redshift-Serverless",
        "redshift-serverless",
        ["redshift-serverless:workgroup", "redshift-serverless:namespace"],
    ),
    ServiceConfig(
        "AWS/Route53Resolver",
        "route53-resolver",
        ["route53resolver"],
        [":resolver-endpoint/(?P<EndpointId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Route53",
        "route53",
        ["route53"],
        [":healthcheck/(?P<HealthCheckId>[^/]+)"],
    ),
    ServiceConfig("AWS/RUM", "rum"),
    ServiceConfig(
        "AWS/S3",
        "s3",
        ["s3"],
        ["(?P<BucketName>[^:]+)$"],
    ),
    ServiceConfig(
        "AWS/SageMaker",
        "sagemaker",
        ["sagemaker:endpoint", "sagemaker:inference-component"],
        [":endpoint/(?P<EndpointName>[^/]+)$", ":inference-component/(?P<InferenceComponentName>[^/]+)$"],
    ),
    ServiceConfig(
        "/aws/sagemaker/Endpoints",
        "sagemaker-endpoints",
        ["sagemaker:endpoint"],
        [":endpoint/(?P<EndpointName>[^/]+)$"],
    ),
    ServiceConfig(
        "/aws/sagemaker/TrainingJobs",
        "sagemaker-training",
        ["sagemaker:training-job"],
    ),
    ServiceConfig(
        "/aws/sagemaker/ProcessingJobs",
        "sagemaker-processing",
        ["sagemaker:processing-job"],
    ),
    ServiceConfig(
        "/aws/sagemaker/TransformJobs",
        "sagemaker-transform",
        ["sagemaker:transform-job"],
    ),
    ServiceConfig(
        "/aws/sagemaker/InferenceRecommendationsJobs",
        "sagemaker-inf-rec",
        ["sagemaker:inference-recommendations-job"],
        [":inference-recommendations-job/(?P<JobName>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/Sagemaker/ModelBuildingPipeline",
        "sagemaker-model-building-pipeline",
        ["sagemaker:pipeline"],
        [":pipeline/(?P<PipelineName>[^/]+)"],
    ),
    ServiceConfig("AWS/Scheduler", "scheduler"),
    ServiceConfig("AWS/SecretsManager", "secretsmanager"),
    ServiceConfig(
        "AWS/SES",
        "ses",
        ["ses"],
        [":configuration-set/(?P<ConfigurationSetName>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/SNS",
        "sns",
        ["sns"],
        ["(?P<TopicName>[^:]+)$"],
    ),
    ServiceConfig(
        "AWS/SQS",
        "sqs",
        ["sqs"],
        ["(?P<QueueName>[^:]+)$"],
    ),
    ServiceConfig(
        "AWS/States",
        "sfn",
        ["states"],
        ["(?P<StateMachineArn>.*)"],
    ),
    ServiceConfig(
        "AWS/StorageGateway",
        "storagegateway",
        ["storagegateway"],
        [":gateway/(?P<GatewayId>[^:]+)$", ":share/(?P<ShareId>[^:]+)$"],
    ),
    ServiceConfig(
        "AWS/Timestream",
        "timestream",
        ["timestream:database", "timestream:table"],
        [":database/(?P<DatabaseName>[^/]+)$", ":database/(?P<DatabaseName>[^/]+)/table/(?P<TableName>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/Transfer",
        "transfer",
        ["transfer:server"],
        [":server/(?P<ServerId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/TransitGateway",
        "tgw",
        ["ec2:transit-gateway"],
        [":transit-gateway/(?P<TransitGateway>[^/]+)$"],
    ),
    ServiceConfig("AWS/TrustedAdvisor", "trustedadvisor"),
    ServiceConfig(
        "AWS/VpcLattice",
        "vpc-lattice",
        ["vpc-lattice:service"],
        [":service/(?P<Service>[^/]+)$"],
    ),
    ServiceConfig(
        "AWS/VPN",
        "vpn",
        ["ec2:vpn-connection"],
        [":vpn-connection/(?P<VpnId>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/ClientVPN",
        "clientvpn",
        ["ec2:client-vpn-endpoint"],
        [":client-vpn-endpoint/(?P<Endpoint>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/WAFV2",
        "wafv2",
        ["wafv2"],
        ["/webacl/(?P<WebACL>[^/]+)"],
    ),
    ServiceConfig(
        "AWS/WorkSpaces",
        "workspaces",
        ["workspaces:workspace", "workspaces:directory"],
        [":workspace/(?P<WorkspaceId>.+)$", ":directory/(?P<DirectoryId>.+)$"],
    ),
    ServiceConfig("AWS/Bedrock", "bedrock"),
]

_SERVICES_BY_NAMESPACE: Dict[str, ServiceConfig] = {service.namespace: service for service in _SUPPORTED_SERVICES}


def get_service(namespace: str) -> Optional[ServiceConfig]:
    """Return the service configuration for a CloudWatch namespace, or None if it is not supported."""
    return _SERVICES_BY_NAMESPACE.get(namespace)


def supported_namespaces() -> List[str]:
    return [service.namespace for service in _SUPPORTED_SERVICES]
