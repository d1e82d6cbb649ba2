"""
Application Layer

Access service, attempt middleware and parameter validators.
"""
