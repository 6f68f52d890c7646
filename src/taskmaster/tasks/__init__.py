"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskPatch, Suggestion, TaskStatus, TaskPriority)
- task_store.py: JSON-file storage, focus selection and progress reports
"""
