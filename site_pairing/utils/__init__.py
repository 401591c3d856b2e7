"""Shared helpers: site id normalisation and site URL building."""
