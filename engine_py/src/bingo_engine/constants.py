"""Game constants and utilities"""

from typing import List

BALL_COUNT = 75
GRID_SIZE = 5
CELL_COUNT = GRID_SIZE * GRID_SIZE
FREE_CELL = 12

# Game types
GAME_TRADITIONAL = "traditional"
GAME_FOUR_CORNERS = "four_corners"
GAME_POSTAGE_STAMP = "postage_stamp"
GAME_COVER_ALL = "cover_all"
GAME_X = "x"
GAME_Y = "y"
GAME_FRAME_OUTSIDE = "frame_outside"
GAME_FRAME_INSIDE = "frame_inside"

GAME_TYPES = [
    GAME_TRADITIONAL,
    GAME_FOUR_CORNERS,
    GAME_POSTAGE_STAMP,
    GAME_COVER_ALL,
    GAME_X,
    GAME_Y,
    GAME_FRAME_OUTSIDE,
    GAME_FRAME_INSIDE,
]

# Calling styles
CALLING_AUTOMATIC = "automatic"
CALLING_MANUAL = "manual"
CALLING_STYLES = [CALLING_AUTOMATIC, CALLING_MANUAL]

# Display settings
COLOR_MODE_THEME = "theme"
COLOR_MODE_SOLID = "solid"
DEFAULT_BRIGHTNESS = 128
DEFAULT_STATIC_COLOR = "#22c55e"
MAX_BRIGHTNESS = 255

# Board access
DEFAULT_BOARD_PIN = "1975"
BOARD_AUTH_TTL_MS = 30 * 60 * 1000
MIN_PIN_LENGTH = 4
MAX_PIN_LENGTH = 11

CARD_ID_LENGTH = 16

# Subscription modes
SUBSCRIBE_NONE = "none"
SUBSCRIBE_BOARD = "board"
SUBSCRIBE_CARD = "card"

# Envelope types
EVENT_SNAPSHOT = "snapshot"
EVENT_CARD_STATE = "card_state"
EVENT_BOARD_AUTH_CHANGED = "board_auth_changed"
EVENT_BOARD_PIN_CHANGED = "board_pin_changed"
EVENT_NUMBER_CALLED = "number_called"
EVENT_NUMBER_UNDONE = "number_undone"
EVENT_GAME_RESET = "game_reset"
EVENT_CALLING_STYLE_CHANGED = "calling_style_changed"
EVENT_GAME_TYPE_CHANGED = "game_type_changed"
EVENT_WINNER_CHANGED = "winner_changed"
EVENT_LED_TEST_CHANGED = "led_test_changed"
EVENT_BRIGHTNESS_CHANGED = "brightness_changed"
EVENT_THEME_CHANGED = "theme_changed"
EVENT_COLOR_CHANGED = "color_changed"
EVENT_CARD_JOINED = "card_joined"
EVENT_CARD_MARK_CHANGED = "card_mark_changed"
EVENT_CARD_LEFT = "card_left"
EVENT_PATTERN_INDEX_CHANGED = "pattern_index_changed"


def fresh_pool() -> List[int]:
    return list(range(1, BALL_COUNT + 1))


def fresh_marks() -> List[bool]:
    return [i == FREE_CELL for i in range(CELL_COUNT)]


def normalize_pin(pin) -> str:
    if pin is None:
        return ""
    return str(pin).strip()
