"""
auth — User authentication module.

Provides:
  • Signed session token creation & verification
  • Password hashing (bcrypt)
  • Register / Login / Logout flow
  • ``SessionGuard`` gate pipeline for protected routes
"""
