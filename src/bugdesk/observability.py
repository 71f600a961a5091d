"""OpenTelemetry wiring for the BugDesk CLI.

The store always creates spans through ``opentelemetry.trace``; without a
configured SDK provider those spans are no-ops.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from typing import Any, Final

from opentelemetry import trace

_telemetry_configured: Final[dict[str, bool]] = {"configured": False}


@lru_cache(maxsize=1)
def _load_sdk() -> dict[str, Any] | None:
    try:  # pragma: no cover - optional dependency
        exporter_module = importlib.import_module(
            "opentelemetry.exporter.otlp.proto.http.trace_exporter"
        )
        resources_module = importlib.import_module("opentelemetry.sdk.resources")
        trace_sdk_module = importlib.import_module("opentelemetry.sdk.trace")
        export_module = importlib.import_module("opentelemetry.sdk.trace.export")
    except ImportError:
        return None

    return {
        "trace": trace,
        "TracerProvider": trace_sdk_module.TracerProvider,
        "Resource": resources_module.Resource,
        "BatchSpanProcessor": export_module.BatchSpanProcessor,
        "ConsoleSpanExporter": export_module.ConsoleSpanExporter,
        "OTLPSpanExporter": exporter_module.OTLPSpanExporter,
    }


def configure_telemetry(
    *,
    service_name: str,
    exporter: str = "console",
    endpoint: str | None = None,
) -> bool:
    """Install an SDK tracer provider once per process.

    Returns ``True`` when an exporter is active, ``False`` when the SDK is
    missing and spans stay no-ops.
    """

    if _telemetry_configured["configured"]:
        return True

    runtime = _load_sdk()
    if runtime is None:
        logging.getLogger(__name__).debug(
            "opentelemetry-sdk not installed; spans for %s stay no-op", service_name
        )
        return False

    resource = runtime["Resource"].create({"service.name": service_name})
    provider = runtime["TracerProvider"](resource=resource)

    if exporter.lower() == "otlp":
        otlp_cls = runtime["OTLPSpanExporter"]
        span_exporter = otlp_cls(endpoint=endpoint) if endpoint else otlp_cls()
    else:
        span_exporter = runtime["ConsoleSpanExporter"]()

    provider.add_span_processor(runtime["BatchSpanProcessor"](span_exporter))
    runtime["trace"].set_tracer_provider(provider)
    runtime["trace"].get_tracer(service_name)
    _telemetry_configured["configured"] = True
    return True


__all__ = ["configure_telemetry"]
