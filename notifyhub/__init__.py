"""Notification delivery API package.

Holds the domain, application, infrastructure and interface layers of the
notification service; the FastAPI entry point lives in the top-level
``main`` module.
"""
