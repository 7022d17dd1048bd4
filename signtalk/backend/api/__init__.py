"""
FastAPI application exposing the vocabulary table and the classifier snapshot store.
"""
from signtalk.backend.api.routes import app, create_app

__all__ = ['app', 'create_app']
