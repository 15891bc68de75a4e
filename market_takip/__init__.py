"""MarketTakip perishable inventory tracker."""

__version__ = "1.0.0"
