from __future__ import annotations

import argparse
from typing import Optional

import pygame

from block_blast.game import BlockBlastGame, GameConfig, JsonBestScoreStore
from .renderer import Layout, Renderer, drag_anchor


class ClearTimer:
    """Fires `resolve_clear` once the clear animation delay has elapsed."""

    def __init__(self, delay_ms: int) -> None:
        self.delay_ms = delay_ms
        self.due_at: Optional[int] = None

    def schedule(self, now: int) -> None:
        self.due_at = now + self.delay_ms

    def cancel(self) -> None:
        self.due_at = None

    def poll(self, game: BlockBlastGame, now: int) -> bool:
        if self.due_at is None or now < self.due_at:
            return False
        self.due_at = None
        if game.pending is not None:
            game.resolve_clear()
        return True


def _drag_target(game: BlockBlastGame, layout: Layout, px: int, py: int) -> None:
    slot = game.dragging
    if slot is None:
        return
    piece = game.pieces[slot]
    if piece is None or not layout.on_board(px, py):
        game.clear_drag_target()
        return
    row, col = layout.cell_at(px, py)
    ar, ac = drag_anchor(piece)
    game.update_drag_target(row - ar, col - ac)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Blast")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--best-score-path", type=str, default=None,
                   help="JSON file holding the best score (default: ~/.block_blast/scores.json)")
    p.add_argument("--clear-delay", type=int, default=350, help="Clear animation length in ms")
    p.add_argument("--cell-size", type=int, default=44)
    return p


def run(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    config = GameConfig(random_seed=args.seed, clear_delay_ms=args.clear_delay)
    game = BlockBlastGame(config, store=JsonBestScoreStore(args.best_score_path))
    layout = Layout(grid_size=config.grid_size, cell_size=args.cell_size, slots=config.pieces_per_set)
    renderer = Renderer(layout)
    timer = ClearTimer(config.clear_delay_ms)

    pygame.init()
    try:
        screen = pygame.display.set_mode((layout.width, layout.height))
        pygame.display.set_caption("Block Blast!")
        clock = pygame.time.Clock()

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        timer.cancel()
                        game.restart()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    slot = layout.slot_at(*event.pos)
                    if slot is not None and game.begin_drag(slot):
                        _drag_target(game, layout, *event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    _drag_target(game, layout, *event.pos)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    outcome = game.commit_drag()
                    if outcome.pending is not None:
                        timer.schedule(pygame.time.get_ticks())

            timer.poll(game, pygame.time.get_ticks())

            renderer.draw(screen, game.snapshot(), pygame.mouse.get_pos())
            pygame.display.flip()
            clock.tick(60)
    finally:
        pygame.quit()

    stats = game.get_game_stats()
    print(f"Score: {stats['final_score']}  Best: {stats['best_score']}  Lines: {stats['lines_cleared']}")


if __name__ == "__main__":  # pragma: no cover
    run()
