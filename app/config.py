import os

class Config:
    # Screen settings
    WIDTH = 1024
    HEIGHT = 768
    FPS = 30

    # Board settings
    BOARD_SIZE = 512
    SQUARE_SIZE = BOARD_SIZE // 8

    # Paths
    ASSETS_PATH = os.environ.get("QCHESS_ASSETS", os.path.join("assets", "p1"))
    BOARD_IMAGE_PATH = os.path.join("assets", "boards", "rect-8x8.svg")

    # Colors
    COLOR_WHITE = (255, 255, 255)
    COLOR_BLACK = (0, 0, 0)
    COLOR_LIGHT_SQUARE = (240, 217, 181)
    COLOR_DARK_SQUARE = (181, 136, 99)
    COLOR_HIGHLIGHT = (255, 255, 0)
    COLOR_VALID_MOVE = (144, 238, 144)
    COLOR_SELECTED = (255, 0, 0)
    COLOR_SPLIT_ANCHOR = (0, 255, 255)
    COLOR_SUPERPOSED = (0, 200, 255)
    COLOR_ENTANGLED = (236, 72, 153)
    COLOR_HINT = (120, 160, 255)

    # Fonts
    FONT_MAIN = "DejaVu Sans"

    # Bot
    BOT_DELAY_MS = 250
