# Collection: groups
# Membership is stored on the group document itself.

"""
groups:
- id: text (primary key, generated)
- group_name: text (not null)
- creator_id: text (not null) - always present in users
- users: text[] (not null) - member ids, creator first
- version: integer (not null, default 0) - bumped on every membership/creator write
- created_at: timestamp

Membership and creator writes are conditional on the version read just
before them, so two concurrent writers cannot overwrite each other's
member list.
"""

GROUPS = "groups"
