"""
OpenTelemetry Configuration

Sets up distributed tracing and logging for the citizen engagement API.
"""

import os
import logging
from typing import Optional
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

SERVICE_NAME = 'citizen-engagement-api'

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}

logger = logging.getLogger(__name__)


def setup_observability(environment: Optional[str] = None) -> Optional[TracerProvider]:
    """
    Initialize OpenTelemetry tracing based on environment configuration.

    Returns:
        The installed tracer provider, or None when tracing is disabled
    """
    environment = environment or os.getenv('ENVIRONMENT', 'development')
    otel_enabled = os.getenv('OTEL_ENABLED', 'true').lower() == 'true'
    service_version = os.getenv('SERVICE_VERSION', '1.0.0')

    setup_structured_logging(environment)

    if not otel_enabled:
        logger.info("OpenTelemetry disabled")
        return None

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": service_version,
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(
        sampler=TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0)),
        resource=resource
    )

    otlp_endpoint = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    if otlp_endpoint:
        headers = None
        if os.getenv('OTEL_API_KEY'):
            headers = {"Authorization": f"Bearer {os.getenv('OTEL_API_KEY')}"}
        tracer_provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=otlp_endpoint, headers=headers),
                max_export_batch_size=512
            )
        )
    elif environment == 'development':
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)
    logger.info(f"OpenTelemetry configured for {environment}")
    return tracer_provider


def setup_structured_logging(environment: str):
    """Configure root logging for an environment."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG,
        'testing': logging.WARNING
    }.get(environment, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if environment == 'production':
        logging.getLogger('pymongo').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

    elif environment == 'development':
        logging.getLogger('citizen_engagement.domain').setLevel(logging.DEBUG)
        logging.getLogger('citizen_engagement.services').setLevel(logging.DEBUG)
        logging.getLogger('pymongo').setLevel(logging.INFO)
