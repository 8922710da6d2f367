from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pygame

from block_blast.game import Piece, SessionSnapshot
from block_blast.game.pieces import COLORS, hex_to_rgb

BACKGROUND = (24, 26, 46)
EMPTY_CELL = (40, 44, 72)
CLEARING_CELL = (255, 255, 255)
TEXT = (235, 235, 245)
MUTED_TEXT = (160, 165, 190)
HIGHLIGHT = (255, 214, 90)


def _color_for_value(v: int) -> Tuple[int, int, int]:
    return EMPTY_CELL if v == 0 else hex_to_rgb(COLORS[v - 1])


def _blend(color: Tuple[int, int, int], alpha: float) -> Tuple[int, int, int]:
    return tuple(int(EMPTY_CELL[i] + (color[i] - EMPTY_CELL[i]) * alpha) for i in range(3))  # type: ignore[return-value]


@dataclass
class Layout:
    """Pixel geometry of the board and the piece tray."""

    grid_size: int = 8
    cell_size: int = 44
    margin: int = 24
    header: int = 70
    tray_cell: int = 22
    slots: int = 3

    @property
    def board_origin(self) -> Tuple[int, int]:
        return self.margin, self.margin + self.header

    @property
    def board_px(self) -> int:
        return self.grid_size * self.cell_size

    @property
    def width(self) -> int:
        return self.margin * 2 + self.board_px

    @property
    def tray_top(self) -> int:
        return self.board_origin[1] + self.board_px + self.margin

    @property
    def tray_height(self) -> int:
        return self.tray_cell * 5 + self.margin

    @property
    def height(self) -> int:
        return self.tray_top + self.tray_height

    def cell_at(self, px: int, py: int) -> Tuple[int, int]:
        """Board (row, col) under a pixel; may be out of range."""
        x0, y0 = self.board_origin
        return (py - y0) // self.cell_size, (px - x0) // self.cell_size

    def on_board(self, px: int, py: int) -> bool:
        x0, y0 = self.board_origin
        return x0 <= px < x0 + self.board_px and y0 <= py < y0 + self.board_px

    def slot_rect(self, slot: int) -> pygame.Rect:
        slot_w = (self.width - self.margin * 2) // self.slots
        return pygame.Rect(self.margin + slot * slot_w, self.tray_top, slot_w, self.tray_cell * 5)

    def slot_at(self, px: int, py: int) -> Optional[int]:
        for slot in range(self.slots):
            if self.slot_rect(slot).collidepoint(px, py):
                return slot
        return None


def drag_anchor(piece: Piece) -> Tuple[int, int]:
    """Cell of the piece held under the pointer: the centre of its bounding box."""
    h, w = piece.size
    return h // 2, w // 2


class Renderer:
    def __init__(self, layout: Optional[Layout] = None) -> None:
        self.layout = layout or Layout()
        self._font: Optional[pygame.font.Font] = None
        self._small: Optional[pygame.font.Font] = None

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._small is None:
            self._font = pygame.font.SysFont(None, 36)
            self._small = pygame.font.SysFont(None, 22)
        return self._font, self._small

    def _draw_cell(self, surf: pygame.Surface, x: int, y: int, size: int, color: Tuple[int, int, int]) -> None:
        rect = pygame.Rect(x + 1, y + 1, size - 2, size - 2)
        pygame.draw.rect(surf, color, rect, border_radius=max(2, size // 8))

    def draw_board(self, surf: pygame.Surface, snap: SessionSnapshot) -> None:
        x0, y0 = self.layout.board_origin
        cs = self.layout.cell_size
        n = snap.colors.shape[0]
        ghost_cells = set()
        ghost_color = None
        if snap.ghost is not None and snap.ghost.valid:
            ghost_cells = set(snap.ghost.cells)
            piece = snap.pieces[snap.ghost.slot]
            ghost_color = piece.rgb if piece is not None else None
        for r in range(n):
            for c in range(n):
                v = int(snap.colors[r, c])
                if snap.clearing[r, c]:
                    color = CLEARING_CELL
                elif v == 0 and (r, c) in ghost_cells and ghost_color is not None:
                    color = _blend(ghost_color, 0.4)
                else:
                    color = _color_for_value(v)
                self._draw_cell(surf, x0 + c * cs, y0 + r * cs, cs, color)

    def _draw_piece(self, surf: pygame.Surface, piece: Piece, x: int, y: int, cell: int) -> None:
        for r, c in piece.cells_at(0, 0):
            self._draw_cell(surf, x + c * cell, y + r * cell, cell, piece.rgb)

    def draw_tray(self, surf: pygame.Surface, snap: SessionSnapshot) -> None:
        tc = self.layout.tray_cell
        for slot, piece in enumerate(snap.pieces):
            rect = self.layout.slot_rect(slot)
            if piece is None or snap.dragging == slot:
                continue
            h, w = piece.size
            x = rect.centerx - (w * tc) // 2
            y = rect.centery - (h * tc) // 2
            self._draw_piece(surf, piece, x, y, tc)

    def draw_dragged(self, surf: pygame.Surface, snap: SessionSnapshot, pointer: Tuple[int, int]) -> None:
        if snap.dragging is None:
            return
        piece = snap.pieces[snap.dragging]
        if piece is None:
            return
        cs = self.layout.cell_size
        ar, ac = drag_anchor(piece)
        x = pointer[0] - ac * cs - cs // 2
        y = pointer[1] - ar * cs - cs // 2
        self._draw_piece(surf, piece, x, y, cs)

    def draw_header(self, surf: pygame.Surface, snap: SessionSnapshot) -> None:
        font, small = self._fonts()
        m = self.layout.margin
        surf.blit(small.render("SCORE", True, MUTED_TEXT), (m, m // 2))
        surf.blit(font.render(str(snap.score), True, TEXT), (m, m // 2 + 18))
        best_label = small.render("BEST", True, MUTED_TEXT)
        best_value = font.render(str(snap.best_score), True, HIGHLIGHT)
        right = self.layout.width - m
        surf.blit(best_label, (right - best_label.get_width(), m // 2))
        surf.blit(best_value, (right - best_value.get_width(), m // 2 + 18))
        if snap.is_clearing and snap.last_points is not None:
            text = f"+{snap.last_points}"
            if snap.combo > 1:
                text += f"  Combo x{snap.combo}!"
            popup = font.render(text, True, HIGHLIGHT)
            surf.blit(popup, popup.get_rect(center=(self.layout.width // 2, m + 20)))

    def draw_game_over(self, surf: pygame.Surface, snap: SessionSnapshot) -> None:
        font, small = self._fonts()
        overlay = pygame.Surface(surf.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 170))
        surf.blit(overlay, (0, 0))
        cx, cy = surf.get_width() // 2, surf.get_height() // 2
        lines: List[Tuple[str, pygame.font.Font, Tuple[int, int, int]]] = [
            ("Oops!", font, TEXT),
            (str(snap.score), font, HIGHLIGHT),
        ]
        if snap.is_new_best:
            lines.append(("New Best!", small, HIGHLIGHT))
        lines.append(("Press R to try again", small, MUTED_TEXT))
        for i, (txt, f, color) in enumerate(lines):
            img = f.render(txt, True, color)
            surf.blit(img, img.get_rect(center=(cx, cy - 40 + i * 34)))

    def draw(self, surf: pygame.Surface, snap: SessionSnapshot, pointer: Tuple[int, int] = (0, 0)) -> None:
        surf.fill(BACKGROUND)
        self.draw_header(surf, snap)
        self.draw_board(surf, snap)
        self.draw_tray(surf, snap)
        self.draw_dragged(surf, snap, pointer)
        if snap.game_over:
            self.draw_game_over(surf, snap)
