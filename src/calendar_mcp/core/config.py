from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "Calendar MCP"
APP_AUTHOR = "CalendarMCP"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))
DATA_STORE_FILE = DATA_DIR / "calendar_data.json"
MEMORY_FILE = DATA_DIR / "memory.json"
LOG_FILE = DATA_DIR / "calendar_mcp.log"
