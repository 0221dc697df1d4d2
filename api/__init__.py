"""
apidocs FastAPI application.

See api.app:create_app for the ASGI application factory.
"""
