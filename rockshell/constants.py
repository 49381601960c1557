# rockshell/constants.py
# Shared constants to avoid circular imports between config.py, rocks.py and cli.py

DEFAULT_COMMAND_NAME = "Rocks"

# Rocks offered by `install` completion before ROCKSHELL_CATALOG extras are added.
DEFAULT_CATALOG = (
    "neorg",
    "neotest",
    "nvim-treesitter",
    "telescope.nvim",
    "plenary.nvim",
    "lualine.nvim",
    "which-key.nvim",
    "rocks-git.nvim",
    "rocks-config.nvim",
)

DEFAULT_VERSION = "latest"

DEFAULT_HISTORY_FILE = ".rockshell_history"
DEFAULT_LOG_FILE = "rockshell.log"

# Seconds the shell waits for deferred tasks before cancelling them on exit.
SHUTDOWN_TIMEOUT = 10.0

EXIT_WORDS = {"exit", "quit"}
