# Identity provider records + users collection
# Credentials live in two places:
# - the identity provider (Supabase Auth auth.users) holds the login identity
# - the users collection (see app.modules.users.models) mirrors the profile
#   and keeps the bcrypt hash that login compares against

"""
Session token claims (HS256, signed with JWT_SECRET):
- uid: identity-provider user id
- email: email at login time
- username: display name at login time
- iat / exp: issue and expiry time (JWT_EXPIRES_MINUTES after issue)

Claims are not re-validated against the store; a profile change after login
is only visible in tokens issued afterwards.
"""

TOKEN_TYPE = "bearer"
