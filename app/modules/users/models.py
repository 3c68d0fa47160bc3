# Collection: users
# Document id is the identity-provider user id.

"""
users:
- id: text (primary key, identity-provider id)
- username: text (not null) - display name
- email: text (unique, not null)
- password: text (not null) - bcrypt hash, never returned by the API
- last_login: timestamp (nullable) - set on each successful login
"""

USERS = "users"
