"""Storefront catalog service: in-memory product filtering, search and sorting."""
