"""
database — SQLAlchemy models, engine setup and the store.
"""
