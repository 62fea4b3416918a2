"""
Task subsystem.

Components:
- task_models.py: the Task record
- task_store.py: SQLite-backed storage (list/insert/update/delete)
- task_feed.py: live snapshot subscriptions fed after every write
"""
