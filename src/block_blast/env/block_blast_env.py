from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_blast.game import COLORS, BlockBlastGame, GameConfig, PieceKind, ScoringRules
from block_blast.game.pieces import hex_to_rgb
from block_blast.game.storage import BestScoreStore

EMPTY_RGB = (30, 30, 36)
PALETTE_RGB = np.array([EMPTY_RGB] + [hex_to_rgb(c) for c in COLORS], dtype=np.uint8)


class BlockBlastEnv(gym.Env):
    """Placement environment: one action places one tray piece.

    Action is (slot, row, col). Line clears are resolved within the same step,
    so every observation is a settled board.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[BestScoreStore] = None,
        invalid_action_penalty: float = -1.0,
        terminal_penalty: float = 0.0,
        score_weight: float = 1.0,
    ) -> None:
        super().__init__()
        self.game = BlockBlastGame(config, rules=rules, store=store)
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.score_weight = float(score_weight)

        size = self.game.config.grid_size
        k = self.game.config.pieces_per_set

        # Observation space: occupancy grid and current piece kinds (-1 for used slots)
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=len(PieceKind) - 1, shape=(k,), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )

        # Action: (slot, row, col)
        self.action_space = spaces.MultiDiscrete((k, size, size))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        grid = (self.game.grid.colors != 0).astype(np.int8)
        pieces = np.array(self.game.get_current_piece_kinds(), dtype=np.int8)
        return {
            "grid": grid,
            "pieces": pieces,
            "pieces_remaining": sum(1 for p in self.game.pieces if p is not None),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": self.game.action_mask(),
            "score": self.game.score,
            "best_score": self.game.best_score,
            "combo": self.game.combo,
            "steps": self.game.step_count,
        }

    def action_masks(self) -> np.ndarray:
        return self.game.action_mask()

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: np.ndarray | Tuple[int, int, int]):
        slot, row, col = map(int, action)

        success, gained, lines = self.game.step(slot, row, col)

        reward_components: Dict[str, float] = {}
        if success:
            reward_components["score"] = self.score_weight * float(gained)
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        terminated = bool(self.game.game_over)
        self._steps += 1
        truncated = self._steps >= self.game.config.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        info = self._get_info()
        info["reward_components"] = reward_components
        info["lines_cleared"] = lines
        info["engine_score_delta"] = float(gained)
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        cell = 12
        img = PALETTE_RGB[self.game.grid.colors.astype(np.intp)]
        return np.repeat(np.repeat(img, cell, axis=0), cell, axis=1)

    def close(self) -> None:
        pass

