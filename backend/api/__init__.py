"""
Gatehouse API package.

Provides the FastAPI application for the Gatehouse principal and
authentication service. The app instance lives in api.app.
"""
