"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority, TaskCategory)
- task_repository.py: tasks collection + query helpers (overdue, due soon)
- task_controller.py: task lifecycle scoped to the current user
- task_filters.py: filter modes, newest-first ordering, category statistics
"""
