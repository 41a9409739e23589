# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Prometheus naming helpers matching the yet-another-cloudwatch-exporter (YACE) conventions.

Metric and label names produced here must be identical to the ones YACE produces
for the same CloudWatch metric, so that dashboards and alerts built against YACE
keep working on metrics enriched from a metric stream.
"""
import re
from typing import Tuple

_REPLACED_CHARACTERS = frozenset(" ,\t/\\.-:=@<>()“")
_PERCENT_SUFFIX = "_percent"

_LABEL_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def prom_string(text: str) -> str:
    """Convert text to a snake_case Prometheus-friendly string."""
    chars = []
    prev = ""
    for char in text:
        if char in _REPLACED_CHARACTERS:
            chars.append("_")
        elif char == "%":
            chars.append(_PERCENT_SUFFIX)
        else:
            if char.isupper() and (prev.islower() or prev.isdigit()):
                chars.append("_")
            chars.append(char.lower())
        prev = char
    return "".join(chars)


def sanitize(text: str) -> str:
    """Replace characters Prometheus does not accept without changing case."""
    chars = []
    for char in text:
        if char in _REPLACED_CHARACTERS:
            chars.append("_")
        elif char == "%":
            chars.append(_PERCENT_SUFFIX)
        else:
            chars.append(char)
    return "".join(chars)


def is_valid_label_name(name: str) -> bool:
    return bool(_LABEL_NAME_PATTERN.match(name))


def prom_string_tag(text: str, labels_snake_case: bool) -> Tuple[bool, str]:
    """
    Normalize a dimension, tag or static label name into a label name suffix.

    Returns a (valid, name) tuple; callers must drop the label when valid is False.
    """
    name = prom_string(text) if labels_snake_case else sanitize(text)
    return is_valid_label_name(name), name


def build_metric_name(namespace: str, metric_name: str, statistic: str = "") -> str:
    """
    Build the YACE metric name for a CloudWatch namespace, metric name and statistic,
    e.g. ("AWS/EC2", "CPUUtilization", "Average") -> "aws_ec2_cpuutilization_average".
    """
    # Some namespaces have a leading forward slash, like /aws/sagemaker/TrainingJobs
    if namespace.startswith("/"):
        namespace = namespace[1:]
    prom_namespace = prom_string(namespace.lower())

    parts = []
    if not prom_namespace.startswith("aws"):
        parts.append("aws_")
    parts.append(prom_namespace)
    parts.append("_")

    # Some metric names repeat part of the namespace, e.g. Glue metrics prefixed with "glue"
    prom_metric_name = prom_string(metric_name)
    skip = 0
    for part in prom_namespace.split("_"):
        if prom_metric_name[skip:].startswith(part):
            skip = len(part)
    prom_metric_name = prom_metric_name[skip:]
    if prom_metric_name.startswith("_"):
        prom_metric_name = prom_metric_name[1:]
    parts.append(prom_metric_name)

    if statistic:
        parts.append("_")
        parts.append(prom_string(statistic))
    return "".join(parts)
