import logging
import sys

import pygame

from .assets import AssetManager
from .config import Config
from .controls import ActionBuilder, Mode
from ai.bot import Bot
from ai.suggest import HintUnavailable, MoveSuggester
from qchess.board import rc_to_square
from qchess.errors import ActionRejected
from qchess.game import QuantumGame
from qchess.moves import Promote
from render.renderer import Renderer, board_origin

logger = logging.getLogger(__name__)

MODE_KEYS = {
    pygame.K_s: Mode.SUPERPOSITION,
    pygame.K_e: Mode.ENTANGLEMENT,
    pygame.K_m: Mode.MEASURE,
    pygame.K_t: Mode.TELEPORT,
    pygame.K_x: Mode.SWAP,
    pygame.K_c: Mode.CLONE,
}
PROMOTION_KEYS = {pygame.K_q: "Q", pygame.K_r: "R", pygame.K_b: "B", pygame.K_n: "N"}


class Game:
    def __init__(self, seed=None):
        pygame.init()
        self.screen = pygame.display.set_mode((Config.WIDTH, Config.HEIGHT))
        pygame.display.set_caption("Quantum Chess")

        self.assets = AssetManager()
        self.assets.load_all()

        self.renderer = Renderer(self.screen, self.assets)
        self.game = QuantumGame(seed=seed)
        self.builder = ActionBuilder()
        self.player_color = 'w'
        self.bot = None
        self.suggester = None
        self.hint = None

    def start(self):
        self._choose_side_menu()

        # White always starts → kalau player pilih black, bot (white) move dulu.
        if self.player_color == "b":
            self._bot_turn()

        clock = pygame.time.Clock()

        while True:
            clock.tick(Config.FPS)
            self._draw()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._quit()

                if event.type == pygame.KEYDOWN:
                    self._handle_key(event.key)

                if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self._handle_click(pygame.mouse.get_pos())

    def _draw(self, thinking=False):
        self.renderer.draw_game(
            self.game,
            self.builder,
            player_color=self.player_color,
            thinking=thinking,
            hint=self.hint,
        )

    def _quit(self):
        if self.suggester is not None:
            self.suggester.stop()
        pygame.quit()
        sys.exit()

    def _choose_side_menu(self):
        while True:
            self.screen.fill((0, 0, 0))
            text = self.assets.fonts['title'].render("Press W or B to choose side", True, (255, 255, 255))
            self.screen.blit(text, (80, Config.HEIGHT // 2 - 50))
            pygame.display.update()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._quit()
                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_w:
                        self.player_color = 'w'
                        self.bot = Bot('b')
                        return
                    elif event.key == pygame.K_b:
                        self.player_color = 'b'
                        self.bot = Bot('w')
                        return

    def _handle_key(self, key):
        if key == pygame.K_ESCAPE:
            if self.game.is_game_over() or self.builder.mode == Mode.CLASSICAL:
                self._quit()
            self.builder.set_mode(self.builder.mode)
            return

        if self.game.pending_promotion is not None:
            if key in PROMOTION_KEYS:
                self._submit(Promote(PROMOTION_KEYS[key]))
            return

        if key == pygame.K_r and self.game.is_game_over():
            self.game.reset()
            self.builder = ActionBuilder()
            self.hint = None
            if self.player_color == "b":
                self._bot_turn()
        elif key in MODE_KEYS:
            self.builder.set_mode(MODE_KEYS[key])
        elif key == pygame.K_k and self.builder.mode == Mode.CLONE:
            self.builder.cycle_clone_kind()
        elif key == pygame.K_h:
            self._request_hint()

    def _handle_click(self, pos):
        if self.game.is_game_over() or self.game.pending_promotion is not None:
            return
        if self.game.turn_color != self.player_color:
            return

        x_off, y_off = board_origin()

        mx, my = pos
        col = (mx - x_off) // Config.SQUARE_SIZE
        row = (my - y_off) // Config.SQUARE_SIZE

        r = 7 - row if self.player_color == 'b' else row
        c = 7 - col if self.player_color == 'b' else col
        if not (0 <= r < 8 and 0 <= c < 8):
            return

        action = self.builder.click(self.game, rc_to_square(r, c))
        if action is not None:
            self._submit(action)

    def _submit(self, action):
        try:
            self.game.apply(action)
        except ActionRejected as exc:
            self.builder.message = exc.message
            self.builder.reset()
            return

        self.hint = None
        self.builder.reset()
        if self.game.pending_promotion is None:
            # balik ke mode classical setelah aksi quantum
            self.builder.mode = Mode.CLASSICAL
            self._bot_turn()

    def _request_hint(self):
        if self.suggester is None:
            self.suggester = MoveSuggester()
        try:
            self.hint = self.suggester.suggest(self.game.state)
        except HintUnavailable as exc:
            logger.info("hint unavailable: %s", exc)
            self.builder.message = "Hint unavailable"
            self.hint = None

    def _bot_turn(self):
        while not self.game.is_game_over() and self.bot and self.game.turn_color != self.player_color:
            self._draw(thinking=True)
            pygame.time.delay(Config.BOT_DELAY_MS)
            before = len(self.game.state.history)
            self.bot.make_move(self.game)
            if len(self.game.state.history) == before and self.game.pending_promotion is None:
                break  # bot gak bisa jalan


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    Game().start()


if __name__ == "__main__":
    main()
