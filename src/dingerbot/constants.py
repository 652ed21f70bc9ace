"""MLB Stats API constants: sport ids, game status codes, event types."""

SPORT_ID_MLB = 1

# Detailed game states (lower-cased) that mean the game will not produce
# further plays. Matched as substrings: "Final: Tied", "Completed Early: Rain".
TERMINAL_STATUS_MARKERS = (
    "final",
    "game over",
    "completed",
    "cancelled",
    "canceled",
    "postponed",
)

# Detailed states that come before first pitch.
PREGAME_STATUSES = ("pre-game", "warmup", "delayed start")

# abstractGameState values reported by the feed
ABSTRACT_PREVIEW = "Preview"
ABSTRACT_LIVE = "Live"
ABSTRACT_FINAL = "Final"

# Notable event defaults (home runs)
HOME_RUN_EVENT_TYPE = "home_run"
HOME_RUN_KEYWORDS = ("homers", "home run")
