"""
core — application context, request/result types and the exception hierarchy.
"""
