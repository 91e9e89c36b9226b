"""
API Routes - HTTP endpoint handlers

Each area (instances, cache, logger) gets its own router, included by create_app.
"""
