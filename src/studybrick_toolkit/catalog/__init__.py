"""
Catalog Package

External collaborators of the paper builder: the live catalog of
questions and study materials, the identity provider, and the bulk
text importer administrators use to populate the catalog.
"""

from .store import (
    QUESTIONS,
    RESOURCES,
    CatalogError,
    CatalogStore,
    InMemoryCatalogStore,
    Subscription,
    load_catalog,
)
from .identity import IdentityProvider, StaticIdentityProvider
from .bulk_parser import ParsedQuestion, build_records, parse_questions

__all__ = [
    "QUESTIONS",
    "RESOURCES",
    "CatalogError",
    "CatalogStore",
    "InMemoryCatalogStore",
    "Subscription",
    "load_catalog",
    "IdentityProvider",
    "StaticIdentityProvider",
    "ParsedQuestion",
    "build_records",
    "parse_questions",
]
