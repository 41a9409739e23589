# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
from logging import Logger, getLogger
from typing import Dict, Optional, Sequence

import grpc

from amazon.opentelemetry.metricstream.config import DEFAULT_EXPORT_TIMEOUT
from amazon.opentelemetry.metricstream.exceptions import MetricExportError
from opentelemetry.instrumentation.utils import suppress_instrumentation
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import ExportMetricsServiceRequest
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2_grpc import MetricsServiceStub

_logger: Logger = getLogger(__name__)

_SCHEMES = ("http://", "https://")


def _target(endpoint: str) -> str:
    """Strip the URL scheme and trailing slash from an endpoint, leaving the host:port gRPC target."""
    for scheme in _SCHEMES:
        if endpoint.startswith(scheme):
            endpoint = endpoint[len(scheme) :]
            break
    return endpoint.rstrip("/")


class OTLPGrpcMetricExporter:
    """
    Sends ExportMetricsServiceRequest messages to an OTLP/gRPC collector endpoint.

    The channel uses plaintext when insecure is set and the default TLS credentials otherwise. Every
    Export call carries the configured headers as metadata and the timeout as its deadline.
    """

    def __init__(
        self,
        endpoint: str,
        insecure: bool = True,
        timeout: datetime.timedelta = DEFAULT_EXPORT_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        channel: Optional[grpc.Channel] = None,
    ):
        self._endpoint = _target(endpoint)
        self._timeout = timeout.total_seconds()
        # gRPC metadata keys must be lowercase
        self._metadata = tuple((key.lower(), value) for key, value in (headers or {}).items())
        if channel is None:
            if insecure:
                channel = grpc.insecure_channel(self._endpoint)
            else:
                channel = grpc.secure_channel(self._endpoint, grpc.ssl_channel_credentials())
        self._channel = channel
        self._stub = MetricsServiceStub(self._channel)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def export(self, export_requests: Sequence[ExportMetricsServiceRequest]) -> None:
        """Export every request in order, stopping at the first failure with a MetricExportError."""
        for request in export_requests:
            with suppress_instrumentation():
                try:
                    self._stub.Export(request, timeout=self._timeout, metadata=self._metadata)
                except grpc.RpcError as exc:
                    raise MetricExportError(f"failed to export metrics to {self._endpoint}: {exc}") from exc
            _logger.debug("Exported %s bytes of metrics to %s", request.ByteSize(), self._endpoint)

    def shutdown(self) -> None:
        self._channel.close()
