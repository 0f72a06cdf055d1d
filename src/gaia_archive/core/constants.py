"""
Configuration constants for BGA scraping and Gaia Project log parsing.

This module centralizes the defaults used by the platform client, the
collector and the storage layer so they stay consistent and easy to tune.
"""

# =============================================================================
# Board Game Arena
# =============================================================================

BGA_BASE_URL = "https://en.boardgamearena.com"

# Gaia Project game id on BGA
GAIA_GAME_ID: int = 1495
GAIA_GAME_NAME = "gaiaproject"

# Game id -> name used by the game panel page
GAME_PANEL_NAMES: dict[int, str] = {GAIA_GAME_ID: GAIA_GAME_NAME}

# Page endpoints (HTML) visited before the matching data endpoint
LOGIN_REFERER_PATH = "/?step=2&page=login"
GAMESTATS_PAGE_PATH = "/gamestats"
GAMEREVIEW_PAGE_PATH = "/gamereview"
TABLE_PAGE_PATH = "/table"
GAMEPANEL_PAGE_PATH = "/gamepanel"

# Data endpoints (JSON)
LOGIN_PATH = "/account/auth/loginUserWithPassword.html"
FINISHED_GAMES_PATH = "/gamestats/gamestats/getGames.html"
GAME_LOG_PATH = "/archive/archive/logs.html"
TABLE_INFO_PATH = "/table/table/tableinfos.html"
PLAYER_SEARCH_PATH = "/omnibar/omnibar/search.html"
RANKING_PATH = "/gamepanel/gamepanel/getRanking.html"

# Cookie through which the platform rotates the request token after login
REQUEST_TOKEN_COOKIE = "TournoiEnLigneidt"

# Substring of the platform's error text when it throttles an account
RATE_LIMIT_SIGNATURE = "You have reached a limit"

# The platform stores ratings with a fixed offset above the displayed value
ELO_OFFSET: int = 1300

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:146.0) "
    "Gecko/20100101 Firefox/146.0"
)
HTML_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,*/*;q=0.8"
)
ACCEPT_LANGUAGE = "en-GB,en;q=0.5"

# =============================================================================
# Collection defaults
# =============================================================================

# Fixed number of rows per history page; shorter pages mean end of history
PAGE_SIZE: int = 10

DEFAULT_TIMEOUT: float = 20.0
DEFAULT_REQUEST_DELAY: float = 1.5
DEFAULT_DETAIL_DELAY: float = 0.5
DEFAULT_MAX_PAGE_FAILURES: int = 3
DEFAULT_TOP_PLAYERS: int = 10
DEFAULT_RANKING_MODE = "elo"
