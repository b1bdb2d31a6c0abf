"""
Core - Domain model, ports, result type, and validation.

Nothing in core imports from adapters, application, or cli.
"""
