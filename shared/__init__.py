"""
Shared utilities for the Word of the Day services.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types, upstream error taxonomy and responses
- retry: Bounded exponential backoff for upstream calls
- base_service: FastAPI service shell (health, metrics, error handlers)

Do not import from service packages into shared/.
"""
