"""Constants for the task harness."""

# Reference setup: cargo workspace with one binary per day.

DEFAULT_LAST_TASK = 25

DEFAULT_BUILD_COMMAND = "cargo build --release"

DEFAULT_BIN_DIR = "target/release"
DEFAULT_INPUT_DIR = "input"

DEFAULT_TASK_PREFIX = "day"
DEFAULT_INPUT_PREFIX = "input"
DEFAULT_INPUT_SUFFIX = ".txt"

DEFAULT_LABEL = "Day"


# Environment variable per config field
ENV_VARS = {
    "last_task": "HARNESS_LAST_TASK",
    "build_command": "HARNESS_BUILD_COMMAND",
    "bin_dir": "HARNESS_BIN_DIR",
    "input_dir": "HARNESS_INPUT_DIR",
    "task_prefix": "HARNESS_TASK_PREFIX",
    "input_prefix": "HARNESS_INPUT_PREFIX",
    "input_suffix": "HARNESS_INPUT_SUFFIX",
    "label": "HARNESS_LABEL",
}

# Shell conventions for processes that never started
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
