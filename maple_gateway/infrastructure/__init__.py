"""
Infrastructure Layer

Cache, HTTP transport and health monitoring.
"""
