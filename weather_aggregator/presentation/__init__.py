"""Presentation Layer - HTTP routers."""
