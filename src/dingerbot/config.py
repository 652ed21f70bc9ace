"""Application configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment variables and .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Subject (defaults: Cal Raleigh, Seattle Mariners)
    player_id: int = 668939
    player_name: str = "Cal Raleigh"
    team_id: int = 136
    timezone: str = "America/Los_Angeles"

    # MLB Stats API
    mlb_api_base_url: str = "https://statsapi.mlb.com/api/v1"
    mlb_live_api_base_url: str = "https://statsapi.mlb.com/api/v1.1"
    request_timeout: float = 15.0
    live_feed_ttl_seconds: float = 10
    season_stats_ttl_seconds: float = 60
    today_ttl_seconds: float = 3600

    # Polling tiers
    batting_poll_seconds: float = 5
    live_poll_seconds: float = 15
    pregame_poll_seconds: float = 60
    pregame_threshold_minutes: float = 15
    lookahead_days: int = 7
    lookahead_recheck_hours: float = 4
    no_game_backoff_minutes: float = 30
    error_retry_seconds: float = 30
    rediscover_seconds: float = 60
    startup_delay_seconds: float = 5

    # At-bat tracking
    at_bat_timeout_minutes: float = 10

    # Watchdog
    watchdog_interval_minutes: float = 30
    watchdog_buffer_seconds: float = 120

    # Notable event predicate
    notable_event_type: str = "home_run"
    notable_keywords: list[str] = ["homers", "home run"]

    # Chat gateway
    chat_gateway_url: str = ""
    chat_gateway_token: str = ""
    recipient_numbers: str = ""
    group_chat_id: str = ""
    notify_at_bats: bool = False
    announce_startup: bool = False

    # Wager
    wager_ledger: dict[str, list[int]] = {}
    season_games: int = 162

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    start_engine: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def recipients(self) -> list[str]:
        """Recipient numbers parsed from the comma-separated setting."""
        return [n.strip() for n in self.recipient_numbers.split(",") if n.strip()]


settings = Settings()
