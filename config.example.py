# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    # HTTP server
    "TASKBOARD_HOST": "Bind address for `taskboard serve` (default: 127.0.0.1).",
    "TASKBOARD_PORT": "Port for `taskboard serve` (default: 3001).",
    "TASKBOARD_CORS_ORIGIN": "Access-Control-Allow-Origin value (default: *).",
    # Paths (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory for logs and tasks (default: .local/taskboard).",
    "TASKBOARD_TASKS_PATH": "Task collection JSON file (default: <data_dir>/tasks.json).",
    "TASKBOARD_SEED_DEMO": "Write demo tasks when the JSON file does not exist yet (default: true).",
    # Console client
    "TASKBOARD_API_BASE_URL": "API the console talks to (default: http://<host>:<port>).",
    "TASKBOARD_REQUEST_TIMEOUT_SECONDS": "Per-request timeout for the console client (default: 10).",
    "TASKBOARD_MODE": "personal | business; business enables assignees (default: personal).",
    "TASKBOARD_CALENDAR_CELL_CAPACITY": "Tasks shown per calendar day before '+K more' (default: 3).",
}
