# render/renderer.py
import chess
import pygame

from app.config import Config
from qchess.board import square_to_rc


def board_origin():
    """Top-left pixel of the board (board is centered in the window)."""
    return (Config.WIDTH - Config.BOARD_SIZE) // 2, (Config.HEIGHT - Config.BOARD_SIZE) // 2


class Renderer:
    def __init__(self, screen, assets):
        self.screen = screen
        self.assets = assets

    def _font(self, *names):
        for name in names:
            if name in self.assets.fonts:
                return self.assets.fonts[name]
        return self.assets.fonts["default"]

    def draw_game(
        self,
        game,
        builder,
        player_color="w",
        thinking=False,
        hint=None,
    ):
        # Background & board
        self.screen.blit(self.assets.background, (0, 0))

        origin = board_origin()
        if self.assets.board_image is not None:
            self.screen.blit(self.assets.board_image, origin)
        else:
            self._draw_squares(player_color)

        # Highlight valid moves
        for sq in builder.valid_moves:
            self._draw_rect(sq, Config.COLOR_VALID_MOVE, alpha=100, player_color=player_color)

        # Split targets picked so far (A, B)
        for label, sq in zip("AB", builder.targets):
            self._draw_rect(sq, Config.COLOR_SPLIT_ANCHOR, alpha=60, player_color=player_color)
            self._draw_rect(sq, Config.COLOR_SPLIT_ANCHOR, width=6, player_color=player_color)
            self._draw_square_label(sq, label, player_color=player_color)

        # Highlight selected square
        if builder.selected is not None:
            self._draw_rect(builder.selected, Config.COLOR_SELECTED, width=4, player_color=player_color)

        if hint is not None:
            for sq in (hint.from_sq, hint.to_sq):
                self._draw_rect(sq, Config.COLOR_HINT, width=4, player_color=player_color)

        # Draw pieces
        self._draw_pieces(game, player_color=player_color)

        # HUD / instructions
        self._draw_hud(game, builder, player_color=player_color, thinking=thinking)

        # Move log
        self._draw_move_log(game.move_log)

        # Thinking overlay
        if thinking:
            font = self._font("small")
            txt = font.render("Computer thinking...", True, (255, 255, 0))
            self.screen.blit(txt, (Config.WIDTH - 250, 20))

        if game.is_game_over():
            self._draw_game_over(game.result())

        pygame.display.update()

    def _square_xy(self, sq, player_color="w"):
        x_off, y_off = board_origin()
        r, c = square_to_rc(sq)
        # Flip view buat black player
        draw_r = 7 - r if player_color == "b" else r
        draw_c = 7 - c if player_color == "b" else c
        return x_off + draw_c * Config.SQUARE_SIZE, y_off + draw_r * Config.SQUARE_SIZE

    def _draw_squares(self, player_color):
        for sq in chess.SQUARES:
            light = (chess.square_file(sq) + chess.square_rank(sq)) % 2 == 1
            color = Config.COLOR_LIGHT_SQUARE if light else Config.COLOR_DARK_SQUARE
            self._draw_rect(sq, color, player_color=player_color)

    def _draw_game_over(self, result_str):
        """Menggambar overlay hitam transparan dengan teks kemenangan."""
        overlay = pygame.Surface((Config.WIDTH, Config.HEIGHT), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        self.screen.blit(overlay, (0, 0))

        title_font = self._font("title")
        sub_font = self._font()

        if result_str == "1-0":
            sub_msg, color = "WHITE WINS!", (100, 255, 100)
        elif result_str == "0-1":
            sub_msg, color = "BLACK WINS!", (255, 100, 100)
        else:
            sub_msg, color = "DRAW / STALEMATE", (200, 200, 200)

        title_surf = title_font.render("GAME OVER", True, (255, 255, 255))
        sub_surf = title_font.render(sub_msg, True, color)

        cx, cy = Config.WIDTH // 2, Config.HEIGHT // 2
        self.screen.blit(title_surf, (cx - title_surf.get_width() // 2, cy - 80))
        self.screen.blit(sub_surf, (cx - sub_surf.get_width() // 2, cy - 20))

        hint = sub_font.render("R: new game   ESC: quit", True, (150, 150, 150))
        self.screen.blit(hint, (cx - hint.get_width() // 2, cy + 60))

    def _draw_hud(self, game, builder, *, player_color, thinking):
        """Panel instruksi: mode aktif, langkah berikutnya, status skak."""
        font = self._font("small")
        is_player_turn = game.turn_color == player_color

        lines = list(builder.prompt)
        if thinking or not is_player_turn:
            lines.append("Waiting for computer…")
        if game.pending_promotion is not None:
            lines.append("Promote: press Q, R, B or N")
        elif game.is_in_check():
            lines.append("CHECK!")
        used = [name for name in ("teleport", "swap", "clone") if game.state.has_used(player_color, name)]
        if used:
            lines.append("Used: " + ", ".join(used))
        lines.append("S split  E entangle  M measure  T teleport  X swap  C clone  H hint")

        pad = 10
        rendered = [font.render(t, True, (255, 255, 255)) for t in lines]
        w = max(s.get_width() for s in rendered) + pad * 2
        h = sum(s.get_height() + 4 for s in rendered) + pad * 2

        # Panel bg transparan
        panel = pygame.Surface((w, h), pygame.SRCALPHA)
        panel.fill((0, 0, 0, 170))
        self.screen.blit(panel, (20, 20))

        y = 20 + pad
        for surf in rendered:
            self.screen.blit(surf, (20 + pad, y))
            y += surf.get_height() + 4

    def _draw_square_label(self, sq, text, player_color="w"):
        """Label kecil di atas kotak (misal 'A' untuk target split pertama)."""
        font = self._font("split", "small")
        x, y = self._square_xy(sq, player_color)

        surf = font.render(text, True, (0, 0, 0))
        bg = pygame.Surface((surf.get_width() + 8, surf.get_height() + 4), pygame.SRCALPHA)
        bg.fill((255, 255, 255, 200))
        self.screen.blit(bg, (x + 6, y + 6))
        self.screen.blit(surf, (x + 10, y + 8))

    def _draw_pieces(self, game, player_color="w"):
        font = self._font("small")

        for piece in game.board:
            for sq in piece.positions:
                x, y = self._square_xy(sq, player_color)

                if piece.is_entangled:
                    self._draw_rect(sq, Config.COLOR_ENTANGLED, width=4, player_color=player_color)
                elif piece.is_superposed:
                    self._draw_rect(sq, Config.COLOR_SUPERPOSED, alpha=70, player_color=player_color)

                img = self.assets.sprites.get(piece.code)
                if img:
                    self.screen.blit(img, (x, y))

                # Tampilkan probabilitas kalo quantum
                if piece.is_superposed:
                    prob = 100 // len(piece.positions)
                    prob_txt = font.render(f"{prob}%", True, (255, 255, 255))
                    self.screen.blit(prob_txt, (x + 5, y + 5))

    def _draw_rect(self, sq, color, alpha=255, width=0, player_color="w"):
        x, y = self._square_xy(sq, player_color)
        rect = (x, y, Config.SQUARE_SIZE, Config.SQUARE_SIZE)

        if alpha < 255:
            s = pygame.Surface((Config.SQUARE_SIZE, Config.SQUARE_SIZE), pygame.SRCALPHA)
            s.set_alpha(alpha)
            s.fill(color)
            self.screen.blit(s, (x, y))
        else:
            pygame.draw.rect(self.screen, color, rect, width)

    def _draw_move_log(self, log):
        pygame.draw.rect(self.screen, (30, 30, 30), (Config.WIDTH - 220, 50, 200, 190))
        font = self._font("small")
        title = font.render("Log", True, (255, 255, 255))
        self.screen.blit(title, (Config.WIDTH - 210, 55))
        for i, txt in enumerate(log[-6:]):
            surf = font.render(str(txt), True, (200, 200, 200))
            self.screen.blit(surf, (Config.WIDTH - 210, 80 + i * 25))
