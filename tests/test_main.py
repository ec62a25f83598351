import pygame

from hexrules.hex_utils import ORIGIN
from hexrules.main import dispatch_event, on_piece_clicked


class RecordingEngine:
    def __init__(self):
        self.calls = []

    def pointer_down(self, x, y):
        self.calls.append(("down", x, y))

    def pointer_move(self, x, y):
        self.calls.append(("move", x, y))

    def pointer_up(self, x, y):
        self.calls.append(("up", x, y))

    def pointer_leave(self):
        self.calls.append(("leave",))

    def escape(self):
        self.calls.append(("escape",))


def test_mouse_events_translated():
    engine = RecordingEngine()
    assert dispatch_event(engine, pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 20)))
    dispatch_event(engine, pygame.event.Event(pygame.MOUSEMOTION, pos=(15, 25), rel=(5, 5), buttons=(1, 0, 0)))
    dispatch_event(engine, pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(15, 25)))
    assert engine.calls == [("down", 10, 20), ("move", 15, 25), ("up", 15, 25)]


def test_other_buttons_ignored():
    engine = RecordingEngine()
    dispatch_event(engine, pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(10, 20)))
    dispatch_event(engine, pygame.event.Event(pygame.MOUSEBUTTONUP, button=3, pos=(10, 20)))
    assert engine.calls == []


def test_escape_and_leave():
    engine = RecordingEngine()
    dispatch_event(engine, pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE))
    dispatch_event(engine, pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a))
    dispatch_event(engine, pygame.event.Event(pygame.WINDOWLEAVE))
    assert engine.calls == [("escape",), ("leave",)]


def test_quit_stops_loop():
    assert not dispatch_event(RecordingEngine(), pygame.event.Event(pygame.QUIT))


def test_click_on_engineer_rotates_beacon(clock):
    from hexrules.game_engine import GameEngine

    engine = GameEngine(setup_file=None, clock=clock)
    beacon = engine.create_piece("beacon", "p1", ORIGIN)
    engineer = engine.create_piece("engineer", "p1", ORIGIN)
    on_piece_clicked(engine, engineer)
    assert beacon.rotation == 1
