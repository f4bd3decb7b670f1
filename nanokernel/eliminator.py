"""The Eliminator light-cycle game: two trails race until one hits a wall or a trail."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional

W_PIX = 1024
H_PIX = 768

RED = 0x00FF0000
GREEN = 0x0000FF00
BLUE = 0x000000FF
BLACK = 0
PLAYER1_COLOR = BLUE
PLAYER2_COLOR = GREEN

PIXEL_SIZE = 4
OFFSET_FROM_CORNER = 4
WIDTH = W_PIX // PIXEL_SIZE - 2 * OFFSET_FROM_CORNER
HEIGHT = H_PIX // PIXEL_SIZE - 2 * OFFSET_FROM_CORNER
START_X_OFFSET = WIDTH // 8
START_Y_OFFSET = WIDTH // 8

BEEP_HZ = 192
BEEP_TICKS = 30

Rect = tuple[int, int, int, int, int]
DrawFn = Callable[[int, int, int, int, int], None]


class Direction(enum.IntEnum):
    """Movement bits: DOWN=1, UP=2, LEFT=4, RIGHT=8."""

    DOWN = 1
    UP = 2
    LEFT = 4
    RIGHT = 8

    @property
    def dx(self) -> int:
        return (self & 0x8) // 8 - (self & 0x4) // 4

    @property
    def dy(self) -> int:
        return (self & 0x1) - (self & 0x2) // 2

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_KEYS = {
    "w": (0, Direction.UP),
    "a": (0, Direction.LEFT),
    "s": (0, Direction.DOWN),
    "d": (0, Direction.RIGHT),
    "i": (1, Direction.UP),
    "j": (1, Direction.LEFT),
    "k": (1, Direction.DOWN),
    "l": (1, Direction.RIGHT),
}


def _large_pixel(color: int, x: int, y: int, n: int = PIXEL_SIZE) -> Rect:
    return (
        color,
        n * (x + OFFSET_FROM_CORNER),
        n * (y + OFFSET_FROM_CORNER),
        n * (x + OFFSET_FROM_CORNER + 1),
        n * (y + OFFSET_FROM_CORNER + 1),
    )


class Playground:
    """The occupancy grid; the outermost ring of cells is wall."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT) -> None:
        if width < 2 or height < 2:
            raise ValueError("playground must be at least 2x2")
        self.width = width
        self.height = height
        self._cells = bytearray(width * height)
        for x in range(width):
            self.occupy(x, 0)
            self.occupy(x, height - 1)
        for y in range(height):
            self.occupy(0, y)
            self.occupy(width - 1, y)

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) is outside the playground")
        return x * self.height + y

    def is_occupied(self, x: int, y: int) -> bool:
        return bool(self._cells[self._index(x, y)])

    def occupy(self, x: int, y: int) -> None:
        self._cells[self._index(x, y)] = 1

    def frame(self) -> list[Rect]:
        """The red border and black field drawn when a round starts."""
        return [
            (
                RED,
                PIXEL_SIZE * OFFSET_FROM_CORNER,
                PIXEL_SIZE * OFFSET_FROM_CORNER,
                PIXEL_SIZE * (self.width + OFFSET_FROM_CORNER),
                PIXEL_SIZE * (self.height + OFFSET_FROM_CORNER),
            ),
            (
                BLACK,
                PIXEL_SIZE * (OFFSET_FROM_CORNER + 1),
                PIXEL_SIZE * (OFFSET_FROM_CORNER + 1),
                PIXEL_SIZE * (self.width + OFFSET_FROM_CORNER - 1),
                PIXEL_SIZE * (self.height + OFFSET_FROM_CORNER - 1),
            ),
        ]


@dataclass
class Player:
    x: int
    y: int
    color: int
    prev_move: Direction
    next_move: Direction
    lost: bool = False
    playing: bool = True

    def steer(self, direction: Direction) -> bool:
        """Set the next move unless it reverses the last one; return whether it was taken."""
        direction = Direction(direction)
        if self.prev_move == direction.opposite:
            return False
        self.next_move = direction
        return True

    def move(self, playground: Playground) -> Optional[Rect]:
        """Advance one cell; return the rectangle drawn, or None if already lost."""
        if self.lost:
            return None
        self.x += self.next_move.dx
        self.y += self.next_move.dy
        rect = _large_pixel(self.color, self.x, self.y)
        if playground.is_occupied(self.x, self.y):
            self.lost = True
        else:
            playground.occupy(self.x, self.y)
        self.prev_move = self.next_move
        return rect


@dataclass
class Score:
    two_players: bool = True
    p1_wins: int = 0
    p2_wins: int = 0
    single_player_deaths: int = 0

    def summary(self) -> str:
        if self.two_players:
            return f"P1 SCORE : {self.p1_wins} P2 SCORE : {self.p2_wins} \n"
        return f"P1 DEATHS : {self.single_player_deaths}\n"


def speed_from_key(key: str) -> int:
    """Map a speed choice '1'..'4' to the wait between steps (4..1 ticks)."""
    if key not in ("1", "2", "3", "4"):
        raise ValueError(f"speed must be a key from 1 to 4, got {key!r}")
    return 5 - int(key)


class EliminatorGame:
    """One round: keys steer the players, each step moves player 2 then player 1."""

    def __init__(
        self,
        score: Optional[Score] = None,
        two_players: bool = True,
        speed: int = 1,
        draw: Optional[DrawFn] = None,
    ) -> None:
        self.score = score if score is not None else Score()
        self.score.two_players = two_players
        self.two_players = two_players
        self.speed = speed
        self._draw = draw
        self.playground = Playground()
        self.p1 = Player(
            START_X_OFFSET, START_Y_OFFSET, PLAYER1_COLOR, Direction.RIGHT, Direction.RIGHT
        )
        self.p2 = Player(
            WIDTH - START_X_OFFSET,
            HEIGHT - START_Y_OFFSET,
            PLAYER2_COLOR,
            Direction.LEFT,
            Direction.LEFT,
            playing=two_players,
        )
        self._finished = False
        for rect in self.playground.frame():
            self._emit(rect)

    def _emit(self, rect: Optional[Rect]) -> None:
        if rect is not None and self._draw is not None:
            self._draw(*rect)

    def handle_key(self, key: str) -> bool:
        """Steer a player from a key press; return whether the key changed a direction."""
        binding = _KEYS.get(key)
        if binding is None:
            return False
        index, direction = binding
        player = self.p1 if index == 0 else self.p2
        return player.steer(direction)

    def step(self) -> None:
        """Move both players once; player 2 moves first and so wins head-on crashes."""
        if self.is_over():
            raise RuntimeError("the round is already over")
        if self.p2.playing:
            self._emit(self.p2.move(self.playground))
        if self.p1.playing:
            self._emit(self.p1.move(self.playground))

    def is_over(self) -> bool:
        return self.p1.lost or self.p2.lost

    def finish(self) -> str:
        """Record the result in the score and return the score line."""
        if not self.is_over():
            raise RuntimeError("the round is not over yet")
        if self._finished:
            raise RuntimeError("the round was already recorded")
        self._finished = True
        if self.p1.lost:
            if self.two_players:
                self.score.p2_wins += 1
            else:
                self.score.single_player_deaths += 1
        else:
            self.score.p1_wins += 1
        return self.score.summary()