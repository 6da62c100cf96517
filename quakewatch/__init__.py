"""QuakeWatch - seismic feed monitoring, alerting and risk assessment."""

__version__ = "1.0.0"
