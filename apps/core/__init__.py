"""
Core app - Admin task harness.

Runs one-off and scheduled administrative operations outside of the
request cycle while reusing the application's domain services:
- Task model (Deferred / InFlight tasks, outcomes)
- Task container lifecycle (one database handle per task chain)
- Audit-logging wrapper
- Task runner (console output and exit status)
- Registry of named admin tasks (run_task command, Celery)
"""
