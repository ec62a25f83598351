import logging
from typing import Optional

import pygame

from .board import Board
from .commands import DROP_BEACON, ROTATE_BEACON, DropBeaconCommand, RotateBeaconCommand
from .config import FPS, GAME_TITLE, SCREEN_HEIGHT, SCREEN_WIDTH
from .game_engine import GameEngine
from .hex_utils import neighbor
from .pieces import Piece, PieceKind

logger = logging.getLogger(__name__)

COLOR_BACKGROUND = (200, 200, 200)
COLOR_HEX_FILL = (235, 235, 225)
COLOR_HEX_BORDER = (90, 90, 90)
COLOR_HIGHLIGHT = (0, 160, 0)
COLOR_NEUTRAL = (128, 128, 128)
COLOR_TEXT = (0, 0, 0)


def on_piece_clicked(engine: GameEngine, piece: Piece) -> None:
    """Default click behaviour: engineers turn the beacon beneath them, transponders drop one."""
    abilities = engine.piece_types[piece.type_id].abilities
    if ROTATE_BEACON in abilities:
        engine.execute(RotateBeaconCommand(piece.piece_id, 1))
    elif DROP_BEACON in abilities:
        engine.execute(DropBeaconCommand(piece.piece_id))


def dispatch_event(engine: GameEngine, event: pygame.event.Event) -> bool:
    """Feeds one pygame event to the engine. Returns False when the window should close."""
    if event.type == pygame.QUIT:
        return False
    if event.type == pygame.MOUSEBUTTONDOWN:
        if event.button == 1:
            engine.pointer_down(*event.pos)
    elif event.type == pygame.MOUSEMOTION:
        engine.pointer_move(*event.pos)
    elif event.type == pygame.MOUSEBUTTONUP:
        if event.button == 1:
            engine.pointer_up(*event.pos)
    elif event.type == pygame.WINDOWLEAVE:
        engine.pointer_leave()
    elif event.type == pygame.KEYDOWN:
        if event.key == pygame.K_ESCAPE:
            engine.escape()
    return True


def _player_color(engine: GameEngine, owner_id: Optional[str]) -> pygame.Color:
    player = engine.state.get_player(owner_id)
    if player is None:
        return pygame.Color(COLOR_NEUTRAL)
    try:
        return pygame.Color(player.color)
    except ValueError:
        return pygame.Color(COLOR_NEUTRAL)


def draw(screen: pygame.Surface, engine: GameEngine, font: pygame.font.Font) -> None:
    screen.fill(COLOR_BACKGROUND)
    for hex_obj in engine.board.hexes.values():
        pygame.draw.polygon(screen, COLOR_HEX_FILL, hex_obj.points)
        pygame.draw.polygon(screen, COLOR_HEX_BORDER, hex_obj.points, 1)

    for coord in engine.highlighted_cells:
        hex_obj = engine.board.get_hex(coord)
        if hex_obj:
            pygame.draw.polygon(screen, COLOR_HIGHLIGHT, hex_obj.points, 3)

    for piece in engine.pieces_in_draw_order():
        color = _player_color(engine, piece.owner_id)
        center = (int(piece.x), int(piece.y))
        if piece.is_marker:
            pygame.draw.circle(screen, color, center, int(piece.radius), 1)
        elif piece.is_beacon:
            pygame.draw.circle(screen, color, center, int(piece.radius), 3)
            for direction in piece.valid_directions():
                target = engine.board.pixel_of(neighbor(piece.coord, direction))
                tip = (center[0] + (target[0] - center[0]) * 0.45, center[1] + (target[1] - center[1]) * 0.45)
                pygame.draw.line(screen, color, center, tip, 2)
        else:
            pygame.draw.circle(screen, color, center, int(piece.radius))
            if piece.kind is PieceKind.DOMINANT:
                pygame.draw.circle(screen, COLOR_TEXT, center, int(piece.radius), 2)
            label = font.render(piece.type_id[:2].upper(), True, COLOR_TEXT)
            screen.blit(label, label.get_rect(center=center))

    if engine.prompt:
        text = font.render(engine.prompt, True, COLOR_TEXT)
        screen.blit(text, (10, 10))


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption(GAME_TITLE)
    font = pygame.font.Font(None, 20)
    clock = pygame.time.Clock()

    board = Board(origin_x=SCREEN_WIDTH / 2, origin_y=SCREEN_HEIGHT / 2)
    engine = GameEngine(board=board)
    engine.on_click = lambda piece: on_piece_clicked(engine, piece)

    running = True
    while running:
        for event in pygame.event.get():
            if not dispatch_event(engine, event):
                running = False
        engine.tick()

        draw(screen, engine, font)
        pygame.display.flip()
        clock.tick(FPS)

    logger.info("Exiting Pygame loop.")
    pygame.quit()


if __name__ == "__main__":
    run()
