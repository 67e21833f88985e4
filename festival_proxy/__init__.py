"""Edge proxy for the Cambridge Beer Festival data API.

This package provides the HTTP service that sits between the festival
client application and the public data provider: CORS handling, the
embedded festival registry, beverage-type discovery and transparent
pass-through of beverage data.
"""

__version__ = "1.0.0"
