"""Prometheus counters for provider routing and chat traffic.

The collectors live on a module-private registry so importing this module
never touches the process-wide default registry.  Expose them with
``prometheus_client.start_http_server(port, registry=REGISTRY)``.
"""
import prometheus_client as prom

__all__ = [
    "REGISTRY",
    "provider_requests",
    "provider_fallbacks",
    "chat_messages",
]

REGISTRY = prom.CollectorRegistry(auto_describe=True)

provider_requests = prom.Counter(
    'lyra_provider_requests',
    'Provider calls by outcome',
    ['provider', 'outcome'],
    registry=REGISTRY,
)
provider_fallbacks = prom.Counter(
    'lyra_provider_fallbacks',
    'Retries against a fallback model',
    ['provider'],
    registry=REGISTRY,
)
chat_messages = prom.Counter(
    'lyra_chat_messages',
    'Transcript entries written',
    ['role'],
    registry=REGISTRY,
)
