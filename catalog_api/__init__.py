"""Product Catalog API.

CRUD service for a product catalog backed by a relational store or an
in-memory alternative.
"""
