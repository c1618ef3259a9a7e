"""meshcheck: health-check aggregation for the service-mesh CLI."""

__version__ = "0.1.0"
