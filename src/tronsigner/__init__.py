"""tronsigner - hot wallet signing service for TRX and TRC20 transfers."""

__version__ = "0.1.0"
