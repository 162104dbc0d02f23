"""GearLedger: bookkeeping core for a bike-parts and service showroom."""

__version__ = "0.1.0"
