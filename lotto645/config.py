"""
Configuration for Lotto 6/45 candidate board - v1.0
"""
import os
import logging
from pathlib import Path

# ============================================================================
# ENVIRONMENT DETECTION
# ============================================================================
IS_RAILWAY = os.getenv("RAILWAY_ENVIRONMENT") is not None
IS_CLOUD = IS_RAILWAY or os.getenv("LOTTO645_CLOUD", "0") == "1"

# Library callers may prefer errors over silent clamping
STRICT_PARAMETERS = os.getenv("LOTTO645_STRICT", "0") == "1"
AUTO_TUNE = os.getenv("LOTTO645_AUTO_TUNE", "1") == "1"

# ============================================================================
# PATHS
# ============================================================================
if os.getenv("LOTTO645_DATA_DIR"):
    DATA_DIR = Path(os.getenv("LOTTO645_DATA_DIR"))
elif IS_RAILWAY:
    DATA_DIR = Path("/app/data")
else:
    BASE_DIR = Path(__file__).parent.parent
    DATA_DIR = BASE_DIR / "data"

DATA_DIR.mkdir(parents=True, exist_ok=True)
DB_PATH = DATA_DIR / "lotto645.db"
DB_URL = os.getenv("LOTTO645_DB_URL", f"sqlite:///{DB_PATH}")

# ============================================================================
# LOTTERY CONFIGURATION - 6/45
# ============================================================================
MIN_NUMBER = 1
MAX_NUMBER = 45
NUMBERS_PER_DRAW = 6
NUMBER_RANGE = (MIN_NUMBER, MAX_NUMBER)
VALID_NUMBERS = list(range(MIN_NUMBER, MAX_NUMBER + 1))
HAS_BONUS = True
BONUS_WEIGHT = 0.5

# Number bands that every candidate set must touch
BANDS = ((1, 15), (16, 30), (31, 45))
MAX_PER_ENDING = 2

# ============================================================================
# BOARD PARAMETERS
# ============================================================================
K_MIN = 6
K_MAX = 15
DEFAULT_CANDIDATE_COUNT = 10
TOTAL_ROUNDS_MIN = 1
TOTAL_ROUNDS_MAX = 180
DEFAULT_TOTAL_ROUNDS = 30
SAMPLE_SIZE = 6
SOFTMAX_TEMPERATURE = 1.0

OBJECTIVES = ("avg", "hiHit")
DEFAULT_OBJECTIVE = "avg"

# (w1 deficit, w2 gap, w3 previous draw, w4 previous draw neighbours)
DEFAULT_WEIGHTS = {'w1': 1.0, 'w2': 0.3, 'w3': 0.8, 'w4': 0.2}
HINT_WEIGHTS = {
    7: {'w1': 0.8, 'w2': 0.0, 'w3': 1.2, 'w4': 0.2},
    10: {'w1': 1.0, 'w2': 0.3, 'w3': 0.8, 'w4': 0.2},
}

# ============================================================================
# TUNING
# ============================================================================
TUNING_SAMPLE_SIZE = 250
# candidate count -> hits the tuner aims for
AUTO_TUNE_TARGETS = {7: 3, 10: 4}

# ============================================================================
# LOGGING
# ============================================================================
LOG_LEVEL = os.getenv("LOTTO645_LOG_LEVEL",
                      "INFO" if IS_CLOUD else "DEBUG").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler()]
)

logger = logging.getLogger("lotto645")

logger.debug(f"Environment: Cloud={IS_CLOUD}, Railway={IS_RAILWAY}")
logger.debug(f"Data directory: {DATA_DIR}")
logger.debug(f"Database URL: {DB_URL}")
logger.debug(f"Number range: {NUMBER_RANGE}, candidates {K_MIN}-{K_MAX}")
if STRICT_PARAMETERS:
    logger.info("Strict parameter validation is ENABLED")
