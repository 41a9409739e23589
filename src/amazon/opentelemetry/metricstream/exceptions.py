# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class MetricStreamError(Exception):
    """Base class for errors raised while enriching a metric stream."""


class ConfigurationError(MetricStreamError):
    """A configuration value could not be parsed."""


class WireDecodeError(MetricStreamError):
    """A length-delimited record in the middle of the stream is malformed."""


class NoResourcesFoundError(MetricStreamError):
    """Resource discovery expected to find tagged resources for a namespace but found none.

    This outcome is not a failure: callers treat it as an empty resource set.
    """


class ResourceFetchError(MetricStreamError):
    """Resource discovery failed for a namespace."""

    def __init__(self, namespace: str, cause: Exception):
        super().__init__(f"failed to get resources for namespace {namespace}: {cause}")
        self.namespace = namespace
        self.cause = cause


class MetricExportError(MetricStreamError):
    """Enriched metrics could not be exported to the collector."""
