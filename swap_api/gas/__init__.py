"""Gas estimation and exchange-proxy overhead tables."""
