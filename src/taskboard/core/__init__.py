"""
Core pieces shared by every subsystem.

Components:
- errors.py: typed failures raised by repositories
- result.py: the Result envelope returned by controllers (+ guarded())
- ports.py: Protocols the repositories depend on
- state.py: App container built by bootstrap.init_app()
"""
