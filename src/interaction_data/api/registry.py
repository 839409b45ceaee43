from prometheus_client import CollectorRegistry

registry = CollectorRegistry()
