"""
Shared utilities for the ACL decision engine.

This package aggregates the ambient building blocks the engine relies on:

- config: Engine settings via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus collectors for decisions and mutations
- errors: Canonical error types and responses

Nothing in here depends on acl_engine; the dependency only runs the other way.
"""
