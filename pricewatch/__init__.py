"""
Laptop Price Catalog

CSV snapshot ETL, price forecasting and ranked search for a laptop catalog.
"""

__version__ = "1.0.0"
