import os
from dotenv import load_dotenv
load_dotenv()
# ---- Alchemy (JSON-RPC provider) ----
ALCHEMY_API_KEY = os.environ.get("ALCHEMY_API_KEY")
ALCHEMY_BASE_URL = os.environ.get("ALCHEMY_BASE_URL", "https://eth-mainnet.g.alchemy.com/v2")
RPC_TIMEOUT_SEC = float(os.environ.get("RPC_TIMEOUT_SEC", "15"))

# ---- Block cache ----
CACHE_DIR = os.environ.get("BLOCKSIGHT_CACHE_DIR", os.path.join(os.getcwd(), "data"))

# ---- Explorer links (side panel) ----
EXPLORER_BASE_URL = os.environ.get("EXPLORER_BASE_URL", "https://etherscan.io")

DEFAULT_BLOCK_NUMBER = int(os.environ.get("DEFAULT_BLOCK_NUMBER", "24041818"))

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_COLOR = os.environ.get("LOG_COLOR", "0").lower() in {"1", "true", "yes"}

# ----- Layout / view -----
CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 800
NODE_RADIUS = 6
ZOOM_SCALE_EXTENT = (0.1, 10.0)
PANEL_MAX_ENTRIES = 50

ROLE_COLORS = {
    "from": "blue",
    "to": "green",
}
LINK_COLOR = "#999"
LINK_OPACITY = 0.6
MESSAGE_COLOR = "#666"
EMPTY_COLOR = "#888"
ERROR_COLOR = "#ff6b6b"
