"""
Task subsystem.

Components:
- date_keys.py: local calendar-day keys and legacy value migration
- task_models.py: data structures (Task, CompletionStatus, TrackerState, Theme)
- task_store.py: persisted state load/save + serialized mutation
- completion.py: create / toggle / finalize / delete rules
- streaks.py: done days, streaks, consistency and the year calendar
- rotation.py: deterministic pick-of-the-day
- rollover.py: local-midnight timer
- task_api.py: small high-level helpers used by the view layer
"""
