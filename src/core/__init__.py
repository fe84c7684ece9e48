"""
Core Deduplication Logic
========================

This package contains the business logic of the catalog deduplication
tool: the catalog data model and REST client, the duplicate detector,
the removal coordinator, and the run orchestration.
"""
