"""
auth — User authentication module.

Provides:
  • JWT bearer token issuance & verification
  • Password hashing (argon2id)
  • Register / Login / Logout API routes
  • ``get_current_user_id`` FastAPI dependency (Bearer header or session cookie)
"""
