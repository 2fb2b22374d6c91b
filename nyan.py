#!/usr/bin/env python3
"""
  =^.^=  N Y A N   R U S H  =^.^=
  A scrolling wall-dodging game for the terminal.

  The cat holds its column in the middle of the screen and trails a
  four-colour tail behind it. Walls roll in from the right edge, each with
  a four-row door somewhere along its height. Slip through the door and
  the score goes up; touch a brick with the cat's head and the run is over.

  Controls:
    w / k / up      move up
    s / j / down    move down
    q               quit

  Run telemetry is logged to nyan_runs.csv beside this script
  (disable with --no-log).
"""

from __future__ import annotations

import argparse
import curses
import sys
import time
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from pathlib import Path
from typing import IO, ClassVar, Iterator, Protocol, Sequence

import numpy as np
from numpy.typing import NDArray


# ── Colours ─────────────────────────────────────────────────────────────
class Color(IntEnum):
    """Base curses colours a glyph may be drawn in."""

    RED = curses.COLOR_RED
    GREEN = curses.COLOR_GREEN
    YELLOW = curses.COLOR_YELLOW
    BLUE = curses.COLOR_BLUE
    WHITE = curses.COLOR_WHITE


DEFAULT_COLOR: Color = Color.WHITE

# ── Shapes ──────────────────────────────────────────────────────────────
# http://evilzone.org/creative-arts/nyan-cat-ascii/
HEAD_SHAPE: tuple[str, ...] = (
    ",-----",
    "|   /\\_/\\",
    "|__( ^ .^)",
    '""  ""',
)
SHAPE_HEIGHT: int = len(HEAD_SHAPE)
HEAD_OFFSET_X: int = 6   # shape's top-left sits this far left of the centre
HEAD_OFFSET_Y: int = 2   # ...and this far above it

TRAIL_PATTERN: tuple[str, ...] = ("o", "o", "o", "o")
TRAIL_COLORS: tuple[Color, ...] = (Color.RED, Color.YELLOW, Color.GREEN, Color.BLUE)

WALL_CHAR: str = "#"
DOOR_HEIGHT: int = 4

# ── Timing & terminal ───────────────────────────────────────────────────
TICK_DELAY: float = 0.008   # seconds between ticks
MIN_ROWS: int = DOOR_HEIGHT + SHAPE_HEIGHT + 2
MIN_COLS: int = 2 * max(len(row) for row in HEAD_SHAPE)

KEY_BINDINGS: dict[int, str] = {
    ord("w"): "move_up",
    ord("W"): "move_up",
    ord("k"): "move_up",
    ord("K"): "move_up",
    curses.KEY_UP: "move_up",
    ord("s"): "move_down",
    ord("S"): "move_down",
    ord("j"): "move_down",
    ord("J"): "move_down",
    curses.KEY_DOWN: "move_down",
    ord("q"): "request_quit",
    ord("Q"): "request_quit",
}

LOG_PATH = Path(__file__).resolve().parent / "nyan_runs.csv"
LOG_EVERY: int = 25   # ticks between periodic log rows


# ═══════════════════════════════════════════════════════════════════════
#  Glyphs & grids
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Glyph:
    """A single character cell on the playfield."""
    x: int
    y: int
    char: str
    color: Color = DEFAULT_COLOR

    def moved(self, dx: int, dy: int) -> Glyph:
        return replace(self, x=self.x + dx, y=self.y + dy)

    def as_tuple(self) -> tuple[int, int, str, Color]:
        return (self.x, self.y, self.char, self.color)


class Grid:
    """An ordered batch of glyphs that move, clip and grow together.

    A grid is built from a multi-line shape anchored at ``(x, y)``: row ``r``
    column ``c`` of the shape becomes a glyph at ``(x + c, y + r)``. Rows may
    differ in length. The only accepted shape is a non-empty list or tuple of
    strings; anything else produces an empty grid.

    Every translation clips the grid against the left edge, so glyphs that
    scroll past column 0 are gone for good.
    """

    def __init__(self, shape: Sequence[str] | None, x: int, y: int) -> None:
        self._data: list[Glyph] = []
        self.height: int = 0

        if not self._well_formed(shape):
            return

        self.height = len(shape)
        for row, line in enumerate(shape):
            for col, char in enumerate(line):
                self._data.append(Glyph(x + col, y + row, char, DEFAULT_COLOR))

    @staticmethod
    def _well_formed(shape: object) -> bool:
        return (
            isinstance(shape, (list, tuple))
            and len(shape) > 0
            and all(isinstance(line, str) for line in shape)
        )

    @property
    def glyphs(self) -> list[Glyph]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Glyph]:
        return iter(self._data)

    def translate(self, dx: int, dy: int) -> None:
        """Shift every glyph by ``(dx, dy)``, then clip at the left edge."""
        self._data = [g.moved(dx, dy) for g in self._data]
        self.clip()

    def clip(self) -> None:
        self._data = [g for g in self._data if g.x >= 0]

    def append(
        self,
        chars: Sequence[str],
        colors: Sequence[Color],
        x: int,
        y: int,
    ) -> None:
        """Paint a vertical column: ``chars[i]`` in ``colors[i]`` at ``(x, y + i)``."""
        if len(chars) != len(colors):
            raise ValueError(
                f"append needs one colour per char, got {len(chars)} chars "
                f"and {len(colors)} colours"
            )
        for i, (char, color) in enumerate(zip(chars, colors)):
            self._data.append(Glyph(x, y + i, char, color))


# ═══════════════════════════════════════════════════════════════════════
#  The cat
# ═══════════════════════════════════════════════════════════════════════

class Head:
    """The player-controlled cat, clamped to the playfield vertically."""

    def __init__(self, x: int, y: int, playfield_height: int) -> None:
        self.x: int = x - HEAD_OFFSET_X
        self.y: int = y - HEAD_OFFSET_Y
        self.playfield_height = playfield_height
        self._grid = Grid(HEAD_SHAPE, self.x, self.y)

    def move_up(self) -> None:
        if self.y > 0:
            self.y -= 1
            self._grid.translate(0, -1)

    def move_down(self) -> None:
        if self.y + self._grid.height < self.playfield_height:
            self.y += 1
            self._grid.translate(0, 1)

    def glyphs(self) -> list[Glyph]:
        return self._grid.glyphs


class Trail:
    """Four coloured dots painted one column behind the head every tick.

    Older columns drift left by one cell per tick and fall off at column 0,
    so the trail follows the head's vertical path like a comet tail.
    """

    def __init__(self, head: Head) -> None:
        self._head = head
        self._grid = Grid([""], head.x - 1, head.y)

    def regenerate(self) -> None:
        self._grid.translate(-1, 0)
        self._grid.append(TRAIL_PATTERN, TRAIL_COLORS, self._head.x - 1, self._head.y)

    def glyphs(self) -> list[Glyph]:
        return self._grid.glyphs


class Character:
    """Head plus trail. Movement goes to the head; ticks go to the trail."""

    def __init__(self, x: int, y: int, playfield_height: int) -> None:
        self.head = Head(x, y, playfield_height)
        self.trail = Trail(self.head)

    def update(self) -> None:
        self.trail.regenerate()

    def glyphs(self) -> list[Glyph]:
        return self.head.glyphs() + self.trail.glyphs()

    def move_up(self) -> None:
        self.head.move_up()

    def move_down(self) -> None:
        self.head.move_down()


# ═══════════════════════════════════════════════════════════════════════
#  Walls
# ═══════════════════════════════════════════════════════════════════════

class RandomSource(Protocol):
    def integers(self, low: int, high: int) -> int: ...


class Barrier:
    """A one-column wall with a door, spawned at the right edge.

    The wall is two grids: bricks above the door and bricks below it. Both
    scroll left one column per tick and clip at column 0 like any other grid.
    """

    def __init__(self, width: int, height: int, rng: RandomSource) -> None:
        if height <= DOOR_HEIGHT:
            raise ValueError(
                f"playfield height {height} leaves no room for a "
                f"{DOOR_HEIGHT}-row door"
            )
        self.width = width
        self.height = height
        self.door_start: int = int(rng.integers(0, height - DOOR_HEIGHT))

        door_end = self.door_start + DOOR_HEIGHT
        self._top = Grid([WALL_CHAR] * self.door_start, width - 1, 0)
        self._bottom = Grid([WALL_CHAR] * (height - door_end), width - 1, door_end)

    def update(self) -> None:
        self._top.translate(-1, 0)
        self._bottom.translate(-1, 0)

    def glyphs(self) -> list[Glyph]:
        return self._top.glyphs + self._bottom.glyphs

    @property
    def exhausted(self) -> bool:
        return len(self._top) == 0 and len(self._bottom) == 0


def _coords(glyphs: Sequence[Glyph]) -> NDArray[np.int64]:
    return np.array([(g.x, g.y) for g in glyphs], dtype=np.int64).reshape(-1, 2)


def collides(head: Sequence[Glyph], barrier: Sequence[Glyph]) -> bool:
    """True iff some head glyph sits on exactly the same cell as a brick.

    Exhaustive pairwise comparison (broadcast to an ``|barrier| x |head|``
    matrix); characters and colours play no part.
    """
    if not head or not barrier:
        return False
    h = _coords(head)
    b = _coords(barrier)
    return bool((b[:, None, :] == h[None, :, :]).all(axis=2).any())


# ═══════════════════════════════════════════════════════════════════════
#  The game
# ═══════════════════════════════════════════════════════════════════════

class State(Enum):
    RUNNING = "running"
    ENDED = "ended"


def walls_phrase(score: int) -> str:
    return "1 wall" if score == 1 else f"{score} walls"


class Simulation:
    """
    One run of the game.

    Each ``tick()`` advances the trail and the current wall, spawns a new
    wall (scoring a point) once the old one has crossed the whole playfield,
    and checks the head against the bricks. A collision or ``request_quit()``
    moves the run to ``State.ENDED``; from then on ticks and moves are
    ignored but ``glyphs()`` still returns the final frame.

    Door placement draws from ``rng`` (a ``numpy.random.Generator`` by
    default, seeded from ``seed``), so runs are reproducible.
    """

    def __init__(
        self,
        width: int,
        height: int,
        rng: RandomSource | None = None,
        seed: int | None = None,
    ) -> None:
        if width // 2 < HEAD_OFFSET_X:
            raise ValueError(
                f"playfield width {width} is too narrow to hold the cat"
            )
        self.width = width
        self.height = height
        self.rng: RandomSource = rng if rng is not None else np.random.default_rng(seed)

        self.score: int = 0
        self.ticks_since_spawn: int = 0
        self.tick_count: int = 0
        self.state: State = State.RUNNING
        self.end_reason: str = ""   # "collision" | "quit"
        self.last_event: str = ""   # "wall" | "collision" | "quit"

        self.character = Character(width // 2, height // 2, height)
        self.barrier = Barrier(width, height, self.rng)

    @property
    def running(self) -> bool:
        return self.state is State.RUNNING

    def tick(self) -> State:
        """Advance one step. Returns the state after the step."""
        if not self.running:
            return self.state

        self.last_event = ""
        self.character.update()
        self.barrier.update()
        self.tick_count += 1

        # Counted before the check so every wall lives exactly width + 1 ticks
        self.ticks_since_spawn += 1
        if self.ticks_since_spawn > self.width:
            self.ticks_since_spawn = 0
            self.score += 1
            self.barrier = Barrier(self.width, self.height, self.rng)
            self.last_event = "wall"

        if self.collision():
            self._end("collision")
        return self.state

    def collision(self) -> bool:
        return collides(self.character.head.glyphs(), self.barrier.glyphs())

    def _end(self, reason: str) -> None:
        self.state = State.ENDED
        self.end_reason = reason
        self.last_event = reason

    # ── Commands ────────────────────────────────────────────────────

    def move_up(self) -> None:
        if self.running:
            self.character.move_up()

    def move_down(self) -> None:
        if self.running:
            self.character.move_down()

    def request_quit(self) -> None:
        if self.running:
            self._end("quit")

    # ── Output ──────────────────────────────────────────────────────

    def glyphs(self) -> list[Glyph]:
        return self.character.glyphs() + self.barrier.glyphs()

    def frame(self) -> list[tuple[int, int, str, Color]]:
        """Render feed: ``(x, y, char, colour)`` for every visible glyph."""
        return [g.as_tuple() for g in self.glyphs()]

    def status_text(self) -> str:
        return f"Nyanyanyanyan!!! {walls_phrase(self.score)}."

    def exit_message(self) -> str:
        return f"Nyan's dead... {walls_phrase(self.score)}."


# ═══════════════════════════════════════════════════════════════════════
#  Run logger
# ═══════════════════════════════════════════════════════════════════════

class RunLogger:
    """Writes per-tick run telemetry to CSV."""

    HEADER: ClassVar[str] = "tick,time_s,score,head_y,door_start,glyphs,event\n"

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    @property
    def enabled(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None

    def log(
        self,
        tick: int,
        score: int,
        head_y: int,
        door_start: int,
        glyphs: int,
        event: str = "",
    ) -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(
                f"{tick},{t:.3f},{score},{head_y},{door_start},{glyphs},{event}\n"
            )
            # Flush on events or periodically
            if event or tick % 50 == 0:
                self._fh.flush()
        except OSError:
            self.close()

    def log_simulation(self, sim: Simulation) -> None:
        self.log(
            tick=sim.tick_count,
            score=sim.score,
            head_y=sim.character.head.y,
            door_start=sim.barrier.door_start,
            glyphs=len(sim.glyphs()),
            event=sim.last_event,
        )

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Rendering
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class ColorMap:
    """Maps glyph colours to curses attributes.

    Until ``setup()`` runs (it needs an initialised screen) every colour
    maps to ``A_NORMAL``, which keeps headless rendering working.
    """

    _attrs: dict[Color, int] = field(default_factory=dict)

    def setup(self) -> None:
        curses.start_color()
        curses.use_default_colors()
        for pair_id, color in enumerate(Color, start=1):
            curses.init_pair(pair_id, int(color), -1)
            self._attrs[color] = curses.color_pair(pair_id)

    def attr(self, color: Color) -> int:
        return self._attrs.get(color, curses.A_NORMAL)


def render(stdscr: curses.window, sim: Simulation, cmap: ColorMap) -> None:
    """Draw the playfield and the status bar (last row)."""
    max_y, max_x = stdscr.getmaxyx()
    field_rows = max_y - 1

    _addstr = stdscr.addstr
    _attr = cmap.attr
    _BOLD = curses.A_BOLD

    for x, y, char, color in sim.frame():
        if not (0 <= y < field_rows and 0 <= x < max_x):
            continue
        try:
            _addstr(y, x, char, _attr(color) | _BOLD)
        except curses.error:
            pass

    status = f"  {sim.status_text()}  q quit  w/s move"[: max_x - 1]
    try:
        stdscr.addstr(max_y - 1, 0, status, curses.A_DIM)
    except curses.error:
        pass


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def apply_key(sim: Simulation, key: int) -> None:
    command = KEY_BINDINGS.get(key)
    if command is not None:
        getattr(sim, command)()


def play(
    stdscr: curses.window,
    sim: Simulation,
    cmap: ColorMap,
    delay: float = TICK_DELAY,
    logger: RunLogger | None = None,
) -> Simulation:
    """Drive ``sim`` until it ends: input, tick, log, render, sleep.

    Ctrl-C counts as quitting the run.
    """
    try:
        while True:
            # ── Input: drain everything pressed since the last tick ──
            while True:
                try:
                    key = stdscr.getch()
                except curses.error:
                    key = -1
                if key == -1:
                    break
                apply_key(sim, key)

            # ── Simulate ───────────────────────────────────────────
            state = sim.tick()

            # ── Log ────────────────────────────────────────────────
            if logger is not None and (sim.last_event or sim.tick_count % LOG_EVERY == 0):
                logger.log_simulation(sim)

            # ── Render ─────────────────────────────────────────────
            stdscr.erase()
            render(stdscr, sim, cmap)
            stdscr.refresh()

            if state is State.ENDED:
                break
            time.sleep(delay)
    except KeyboardInterrupt:
        sim.request_quit()
        if logger is not None:
            logger.log_simulation(sim)

    return sim


def main(
    stdscr: curses.window,
    seed: int | None = None,
    delay: float = TICK_DELAY,
    log_path: Path | None = LOG_PATH,
) -> Simulation | None:
    """Play one run. Returns the finished simulation, or None if the
    terminal is too small to hold the cat and a door."""
    curses.curs_set(0)
    stdscr.nodelay(True)
    stdscr.timeout(0)
    stdscr.keypad(True)

    cmap = ColorMap()
    cmap.setup()

    max_y, max_x = stdscr.getmaxyx()
    if max_y - 1 < MIN_ROWS or max_x < MIN_COLS:
        return None
    sim = Simulation(max_x, max_y - 1, seed=seed)

    logger = RunLogger(log_path) if log_path is not None else None
    if logger is not None:
        logger.open()
    try:
        return play(stdscr, sim, cmap, delay, logger)
    finally:
        if logger is not None:
            logger.close()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dodge the walls, nyan style")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for door placement (default: random)")
    parser.add_argument("--delay", type=float, default=TICK_DELAY * 1000.0,
                        help=f"Milliseconds between ticks (default: {TICK_DELAY * 1000.0:g})")
    parser.add_argument("--log", type=Path, default=LOG_PATH,
                        help=f"CSV telemetry path (default: {LOG_PATH.name})")
    parser.add_argument("--no-log", action="store_true",
                        help="Don't write run telemetry")
    return parser.parse_args(argv)


def run(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    sim = curses.wrapper(
        main,
        seed=args.seed,
        delay=max(0.0, args.delay) / 1000.0,
        log_path=None if args.no_log else args.log,
    )
    if sim is None:
        print(f"Terminal too small: need at least {MIN_COLS}x{MIN_ROWS + 1}.",
              file=sys.stderr)
        return 1
    print(sim.exit_message())
    return 0


if __name__ == "__main__":
    sys.exit(run())
