"""
posts — post flow: dashboard, create, like, edit, delete.
"""
