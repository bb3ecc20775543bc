"""
Configuration for the 0DTE Options Explorer
"""
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / "logs"

# Tickers offered in the selector
TICKERS = ["SPY", "QQQ", "AAPL", "TSLA", "NVDA"]

# Regular session (exchange local time)
MARKET_TIMEZONE = "America/New_York"
SESSION_OPEN_MINUTE = 9 * 60 + 30  # 09:30
SESSION_CLOSE_MINUTE = 16 * 60     # 16:00, exclusive
SESSION_LENGTH_MINUTES = SESSION_CLOSE_MINUTE - SESSION_OPEN_MINUTE

# Daily move scanner
DEFAULT_SCAN_DAYS = 30
DEFAULT_MOVE_RANGE = "0.10-0.50"
MOVE_RANGE_PRESETS = {
    "0.05-0.20": "0.05% - 0.20% (Tiny moves)",
    "0.10-0.50": "0.10% - 0.50% (Small moves)",
    "0.20-1.00": "0.20% - 1.00% (Medium moves)",
    "0.50-2.00": "0.50% - 2.00% (Good moves)",
    "1.00-3.00": "1.00% - 3.00% (Strong moves)",
    "2.00-5.00": "2.00% - 5.00% (Big moves)",
    "3.00-10.00": "3.00% - 10.00% (Huge moves)",
    "0.05-10.00": "0.05% - 10.00% (All moves)",
}
DEFAULT_MIN_MOVE_PERCENT = 2.0
DEFAULT_MIN_MOVE_AMOUNT = 5.0

# Intraday pattern scanner
WARMUP_BARS = 5
DEFAULT_MIN_STOCK_MOVE = 0.10       # dollars
DEFAULT_MAX_HOLD_MINUTES = 15
DEFAULT_MIN_VOLUME = 1000
DEFAULT_MIN_ESTIMATED_PROFIT = 10.0  # dollars per contract
PRICE_TOLERANCE = 1e-9

# (upper bound of move %, multiplier); moves at or above the last bound use the fallback
LEVERAGE_TIERS = ((0.1, 8.0), (0.2, 15.0), (0.5, 20.0))
LEVERAGE_FALLBACK = 25.0

# Synthetic option pricing (heuristic, see option_pricing.py)
PRICE_FLOOR = 0.01
ZERO_DTE_BASE_TIME_VALUE = 0.10
ZERO_DTE_MIN_TIME_VALUE = 0.02
ZERO_DTE_DISTANCE_PENALTY = 0.01   # per dollar from strike
ZERO_DTE_DECAY_RATE = 2.0          # time value hits its floor at mid-session
ZERO_DTE_DECAY_FLOOR = 0.01
MULTI_DAY_BASE_TIME_VALUE = 0.15   # scaled by sqrt(days / 365)
MULTI_DAY_DISTANCE_PENALTY = 0.02
MULTI_DAY_MIN_DISTANCE_FACTOR = 0.3

# Strike ladder
STRIKE_LADDER_WIDTH = 10
LADDER_PROFIT_MULTIPLIER = 15.0
LADDER_TARGET_OFFSET = 0.20

# Trade economics
CONTRACT_MULTIPLIER = 100
ENTRY_TIME_VALUE = 0.50            # typical 0DTE time value at entry
TIME_DECAY_PER_MINUTE = 0.02
EXIT_TIME_VALUE_FLOOR = 0.05
MAX_CONTRACTS = 100

# Logging
LOG_LEVEL = "INFO"
