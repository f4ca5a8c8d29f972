"""
Constants for roulette analytics system
"""

# European wheel, physical slot order starting at angle 0
WHEEL_LAYOUT = (
    0, 32, 15, 19, 4, 21, 2, 25, 17, 34, 6, 27, 13, 36, 11, 30,
    8, 23, 10, 5, 24, 16, 33, 1, 20, 14, 31, 9, 22, 18, 29, 7,
    28, 12, 35, 3, 26
)
POCKET_COUNT = len(WHEEL_LAYOUT)

# Sentinel for a withheld prediction
NO_PREDICTION = -1

# Landing model
WHEEL_RADIUS = 400.0
FRICTION_FACTOR = 0.95
MIN_BALL_VELOCITY = 1.0
MIN_WHEEL_SPEED = 0.1
MAX_RELIABLE_BALL_VELOCITY = 100.0
MAX_RELIABLE_WHEEL_SPEED = 50.0
MAX_RELIABLE_PREDICTION_TIME = 5.0  # seconds

# Confidence degradation factors
BALL_VELOCITY_PENALTY = 0.8
WHEEL_SPEED_PENALTY = 0.8
PREDICTION_TIME_PENALTY = 0.7
MAX_CONFIDENCE = 100.0

# Scheduling
MIN_BALL_CONFIDENCE = 0.7
PREDICTION_INTERVAL_MS = 500
RECENT_RESULTS_LIMIT = 10

# Retry policy
FRAME_RETRY_COUNT = 3
FRAME_RETRY_DELAY_MS = 100
MAX_RETRY_DELAY_MS = 5000

# Metrics
DEFAULT_FPS = 30.0
METRICS_UPDATE_INTERVAL_MS = 1000
ERROR_RATE_THRESHOLD = 0.1
DROPPED_FRAMES_THRESHOLD = 30  # per second

# Pipeline resources
FRAME_CHANNEL_CAPACITY = 4
FRAME_BUFFER_POOL_SIZE = 8

# Persistence
RETENTION_DAYS = 30
MS_PER_DAY = 24 * 60 * 60 * 1000

# Reporting windows
SHORT_WINDOW = 100
LONG_WINDOW = 1000
HOT_COLD_COUNT = 5
