"""
Task subsystem (server side).

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority) and the wire codec
- errors.py: InvalidInput / NotFound / StoreUnavailable
- task_store.py: JSON-file storage, whole collection per read/write
- task_service.py: create / update / delete / duplicate over the store
"""
