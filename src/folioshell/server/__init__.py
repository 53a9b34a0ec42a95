"""HTTP server module for folioshell.

FastAPI application serving client configuration, the message of the
day, the sudo Authorizer, login persistence and live server statistics.
"""
