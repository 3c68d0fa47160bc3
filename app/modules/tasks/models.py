# Collection: tasks

"""
tasks:
- id: text (primary key, generated)
- name: text (not null)
- description: text (nullable)
- time: text (nullable) - scheduled time as sent by the client
- status: text (not null) - open set, e.g. "pending", "done";
  closed to ALLOWED_TASK_STATUSES when that setting is non-empty
- category: text (nullable)
- user_id: text (not null) - owner
- creator_id: text (not null) - caller for personal tasks, group creator for group tasks
- group_id: text (nullable) - absent for personal tasks
- created_at: timestamp
- updated_at: timestamp (nullable) - set by status updates only
"""

TASKS = "tasks"
