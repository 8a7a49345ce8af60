"""
User subsystem.

Components:
- user_models.py: User record
- user_repository.py: users collection (unique usernames)
- user_controller.py: login/logout/registration session
"""
