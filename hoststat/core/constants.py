"""Constants and default values for the host telemetry agent."""

# Scheduler defaults
DEFAULT_FREQ_MINUTES = 5  # Reporting frequency in minutes
SECONDS_PER_MINUTE = 60

# CPU sampling window (blocking, bounds minimum cycle time)
CPU_SAMPLE_INTERVAL_SECONDS = 1.0

# GPU usage sentinel: no GPU present or read failed
GPU_UNAVAILABLE = -1.0
GPU_USAGE_MIN = 0.0
GPU_USAGE_MAX = 100.0

# Architecture discovery
LSCPU_COMMAND = ("lscpu", "--json")
LSCPU_TIMEOUT_SECONDS = 10.0

# Local store
DEFAULT_DB_PATH = "./server_monitor.db"
STATS_TABLE = "system_stats"

# Reporting
SUCCESS_STATUS_CODE = 200
CONTENT_TYPE_JSON = "application/json"
