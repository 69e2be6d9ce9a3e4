"""
Infrastructure Layer

Concrete adapters behind the domain's interfaces: HTTP weather sources,
retry and circuit-breaker wrappers, the in-memory history store, the cycle
coordinator and the health check service.
"""
