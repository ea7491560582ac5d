"""OpenTelemetry helpers for metrics instrumentation."""

from opentelemetry import metrics
from opentelemetry.metrics import Histogram
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader


_meter_provider_initialized = False


def init_metrics() -> None:
    """Initialize OpenTelemetry metrics with a console exporter."""
    global _meter_provider_initialized
    if _meter_provider_initialized:
        return
    reader = PeriodicExportingMetricReader(ConsoleMetricExporter())
    provider = MeterProvider(metric_readers=[reader])
    metrics.set_meter_provider(provider)
    _meter_provider_initialized = True


def get_request_duration_histogram(export: bool = True) -> Histogram:
    """
    Return a histogram for settings request duration metrics.

    With export=False the global (no-op unless configured elsewhere) meter
    provider is used as is.
    """
    if export:
        init_metrics()
    meter = metrics.get_meter("shopify_settings_app")
    return meter.create_histogram(
        name="settings.request.duration",
        unit="ms",
        description="Duration of settings requests",
    )
