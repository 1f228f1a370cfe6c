"""
Scribe API package.

Provides the FastAPI application for the Scribe post relay. The
application object lives in api.app.
"""
