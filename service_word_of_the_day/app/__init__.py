"""
Word of the Day service application package.

The service answers one question: what is today's featured word, and what
does it mean? It composes a random-word upstream and a dictionary upstream
into a single result cached for a day, degrading gracefully when either
upstream misbehaves.

Structure:
- app.main: FastAPI app and route wiring.
- app.config: Settings for upstream URLs, retry policy and cache sizing.
- app.adapters: HTTP clients for the upstream providers.
- app.caching: TTL result cache and per-key locking.
- app.domain: Result types, source capabilities and the orchestrator.
"""
