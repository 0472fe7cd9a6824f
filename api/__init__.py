"""
api — HTTP binding: routes, rendering, error handlers, middleware.
"""
