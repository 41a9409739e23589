# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from unittest import TestCase

from metric_stream_helpers import label_keys, labels_as_dict

from amazon.opentelemetry.metricstream._descriptor import Dimension, MetricDescriptor, ResourceContext
from amazon.opentelemetry.metricstream._labels import build_labels
from amazon.opentelemetry.metricstream._tagging import Tag, TaggedResource

_INSTANCE_ARN = "arn:aws:ec2:us-east-1:123456789012:instance/i-0123456789abcdef0"


class TestBuildLabels(TestCase):
    def setUp(self):
        self.descriptor = MetricDescriptor(
            namespace="AWS/EC2",
            metric_name="CPUUtilization",
            dimensions=[Dimension("InstanceId", "i-0123456789abcdef0")],
        )
        self.resource = TaggedResource(
            _INSTANCE_ARN, "AWS/EC2", "us-east-1", [Tag("Name", "x"), Tag("Environment", "prod")]
        )
        self.context = ResourceContext(account_id="123456789012", region="us-east-1")

    def test_matched_resource_labels_are_complete_and_ordered(self):
        labels = build_labels(
            self.descriptor, self.resource, False, self.context, static_labels={"team": "platform"}
        )

        self.assertEqual(
            label_keys(labels),
            [
                "region",
                "account_id",
                "namespace",
                "name",
                "dimension_instance_id",
                "tag_name",
                "tag_environment",
                "custom_tag_team",
            ],
        )
        self.assertEqual(
            labels_as_dict(labels),
            {
                "region": "us-east-1",
                "account_id": "123456789012",
                "namespace": "AWS/EC2",
                "name": _INSTANCE_ARN,
                "dimension_instance_id": "i-0123456789abcdef0",
                "tag_name": "x",
                "tag_environment": "prod",
                "custom_tag_team": "platform",
            },
        )

    def test_exported_tags_filter(self):
        labels = build_labels(self.descriptor, self.resource, False, self.context, exported_tags=["Name"])

        keys = label_keys(labels)
        self.assertIn("tag_name", keys)
        self.assertNotIn("tag_environment", keys)

    def test_exported_tag_missing_on_resource_has_empty_value(self):
        labels = build_labels(self.descriptor, self.resource, False, self.context, exported_tags=["Name", "Owner"])

        self.assertEqual(labels_as_dict(labels)["tag_owner"], "")

    def test_no_resource_uses_global_name(self):
        labels = build_labels(self.descriptor, None, False, self.context, static_labels={"team": "platform"})

        self.assertEqual(
            label_keys(labels), ["region", "account_id", "namespace", "name", "dimension_instance_id"]
        )
        self.assertEqual(labels_as_dict(labels)["name"], "global")

    def test_skipped_resource_is_not_used(self):
        labels = build_labels(self.descriptor, self.resource, True, self.context)

        self.assertEqual(labels_as_dict(labels)["name"], "global")
        self.assertNotIn("tag_name", label_keys(labels))

    def test_default_labels_adds_static_labels_without_resource(self):
        labels = build_labels(
            self.descriptor, None, False, self.context, static_labels={"team": "platform"}, default_labels=True
        )

        self.assertEqual(labels_as_dict(labels)["custom_tag_team"], "platform")

    def test_empty_context_is_omitted(self):
        labels = build_labels(self.descriptor, None, False, ResourceContext())

        self.assertEqual(label_keys(labels), ["namespace", "name", "dimension_instance_id"])

    def test_labels_without_snake_case(self):
        labels = build_labels(self.descriptor, self.resource, False, self.context, labels_snake_case=False)

        keys = label_keys(labels)
        self.assertIn("dimension_InstanceId", keys)
        self.assertIn("tag_Name", keys)

    def test_invalid_names_are_dropped_with_warning(self):
        descriptor = MetricDescriptor(
            namespace="AWS/EC2",
            metric_name="CPUUtilization",
            dimensions=[Dimension("InstanceId", "i-1"), Dimension("ünit", "x")],
        )
        resource = TaggedResource(_INSTANCE_ARN, "AWS/EC2", "us-east-1", [Tag("1st", "a"), Tag("Name", "x")])

        with self.assertLogs("amazon.opentelemetry.metricstream._labels", level="WARNING") as logs:
            labels = build_labels(descriptor, resource, False, self.context, static_labels={"9team": "platform"})

        self.assertEqual(
            label_keys(labels),
            ["region", "account_id", "namespace", "name", "dimension_instance_id", "tag_name"],
        )
        self.assertEqual(len(logs.records), 3)
        self.assertIn("ünit", logs.output[0])
