# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
from logging import Logger, getLogger
from typing import Dict, Optional, Sequence

import requests

from amazon.opentelemetry.metricstream.config import DEFAULT_EXPORT_TIMEOUT
from amazon.opentelemetry.metricstream.exceptions import MetricExportError
from opentelemetry.instrumentation.utils import suppress_instrumentation
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import ExportMetricsServiceRequest

_logger: Logger = getLogger(__name__)

METRICS_PATH = "/v1/metrics"
_CONTENT_TYPE = "application/x-protobuf"


class OTLPHttpMetricExporter:
    """Sends ExportMetricsServiceRequest messages to an OTLP/HTTP collector endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: datetime.timedelta = DEFAULT_EXPORT_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self._endpoint = endpoint.rstrip("/")
        if not self._endpoint.endswith(METRICS_PATH):
            self._endpoint += METRICS_PATH
        self._timeout = timeout.total_seconds()
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": _CONTENT_TYPE})
        if headers:
            self._session.headers.update(headers)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def export(self, export_requests: Sequence[ExportMetricsServiceRequest]) -> None:
        """Export every request in order, stopping at the first failure with a MetricExportError."""
        for request in export_requests:
            serialized_data = request.SerializeToString()
            # Export calls must not be traced by the instrumentation they report on
            with suppress_instrumentation():
                try:
                    response = self._session.post(self._endpoint, data=serialized_data, timeout=self._timeout)
                except requests.exceptions.RequestException as exc:
                    raise MetricExportError(f"failed to export metrics to {self._endpoint}: {exc}") from exc

            if not response.ok:
                raise MetricExportError(
                    f"failed to export metrics to {self._endpoint}: HTTP {response.status_code} {response.reason}"
                )
            _logger.debug("Exported %s bytes of metrics to %s", len(serialized_data), self._endpoint)

    def shutdown(self) -> None:
        self._session.close()
