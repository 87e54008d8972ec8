import io
import logging
import os
import sys

import cairosvg
import pygame

from .config import Config

logger = logging.getLogger(__name__)

PIECE_NAMES = {"K": "king", "Q": "queen", "R": "rook", "B": "bishop", "N": "knight", "P": "pawn"}
GLYPHS = {
    "wK": "♔", "wQ": "♕", "wR": "♖", "wB": "♗", "wN": "♘", "wP": "♙",
    "bK": "♚", "bQ": "♛", "bR": "♜", "bB": "♝", "bN": "♞", "bP": "♟",
}


class AssetManager:
    def __init__(self):
        self.sprites = {}
        self.background = None
        self.board_image = None
        self.fonts = {}

    def load_all(self):
        """Load semua aset"""
        try:
            self._load_fonts()
            self._load_images()
        except pygame.error as e:
            logger.error("loading assets failed: %s", e)
            sys.exit(1)
        logger.info("assets loaded (%d sprites)", len(self.sprites))

    def _load_fonts(self):
        self.fonts['default'] = pygame.font.SysFont(Config.FONT_MAIN, 32)
        self.fonts['title'] = pygame.font.SysFont(Config.FONT_MAIN, 42, bold=True)
        self.fonts['small'] = pygame.font.SysFont(Config.FONT_MAIN, 20)
        self.fonts['split'] = pygame.font.SysFont(Config.FONT_MAIN, 18, bold=True)
        self.fonts['glyph'] = pygame.font.SysFont(Config.FONT_MAIN, Config.SQUARE_SIZE - 8)

    def _load_images(self):
        # Load bg
        bg_path = os.path.join(Config.ASSETS_PATH, "bg.jpg")
        if os.path.exists(bg_path):
            img = pygame.image.load(bg_path)
            self.background = pygame.transform.scale(img, (Config.WIDTH, Config.HEIGHT))
        else:
            # Fallback klo gambar gaada
            self.background = pygame.Surface((Config.WIDTH, Config.HEIGHT))
            self.background.fill((50, 50, 50))

        # Board svg (None -> renderer draws plain squares)
        self.board_image = self._load_svg(Config.BOARD_IMAGE_PATH, (Config.BOARD_SIZE, Config.BOARD_SIZE))

        # Pieces svg, glyph fallback
        size = (Config.SQUARE_SIZE, Config.SQUARE_SIZE)
        for color in ("w", "b"):
            for p_char, p_name in PIECE_NAMES.items():
                code = f"{color}{p_char}"
                path = os.path.join(Config.ASSETS_PATH, f"{p_name}-{color}.svg")
                self.sprites[code] = self._load_svg(path, size) or self._render_glyph(code, size)

    def _render_glyph(self, code, size):
        surf = pygame.Surface(size, pygame.SRCALPHA)
        text = self.fonts['glyph'].render(GLYPHS[code], True, Config.COLOR_BLACK)
        surf.blit(text, ((size[0] - text.get_width()) // 2, (size[1] - text.get_height()) // 2))
        return surf

    def _load_svg(self, path, size):
        """Helper private untuk konversi SVG ke Surface. None kalau gagal."""
        if not os.path.exists(path):
            logger.debug("asset not found: %s", path)
            return None
        try:
            png_bytes = cairosvg.svg2png(url=path, output_width=size[0], output_height=size[1])
            return pygame.image.load(io.BytesIO(png_bytes)).convert_alpha()
        except (OSError, ValueError, pygame.error) as e:
            logger.warning("failed to load %s: %s", path, e)
            return None
