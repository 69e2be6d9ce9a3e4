"""
Weather Aggregator Root Module

Periodically fetches readings from several weather sources, reconciles them
into one record per location and keeps a bounded, queryable history.

Layer Structure:
- Domain: Entities, ports, gateway contracts and pure services
- Application: Use cases and DTOs
- Infrastructure: HTTP sources, resilience, in-memory store and scheduling
- Presentation: Controllers for the REST API
- Shared: Cross-cutting concerns and shared utilities
- Main: Composition root, application entry point and configuration
"""
