# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "CONSISTENCY_APP_NAME": "App display name (default: consistency-calendar).",
    "CONSISTENCY_LOG_LEVEL": "Console logging level (default: INFO).",
    "CONSISTENCY_LOG_TO_FILE": "Also write full logs to <data_dir>/consistency.log (true/false, default: true).",
    # Paths (gitignored)
    "CONSISTENCY_DATA_DIR": "Local data directory (default: .local/consistency).",
    "CONSISTENCY_STATE_DB_PATH": "SQLite key-value store path (default: <data_dir>/state.sqlite3).",
    # Persistence
    "CONSISTENCY_STORAGE_KEY": "Key the app state is stored under (default: todoApp).",
    # Day rollover
    "CONSISTENCY_ROLLOVER_ENABLED": "Create the local-midnight rollover timer (true/false, default: true).",
}
