from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces


def flat_action_mask(env: gym.Env) -> np.ndarray:
    """Placement mask of the underlying BlockBlastEnv in (slot, row, col) C-order."""
    return env.unwrapped.action_masks().reshape(-1)


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Flattens MultiDiscrete (slot, row, col) -> Discrete(N) for PPO.

    Also exposes `get_action_mask()` returning a 1D boolean mask of shape (N,).
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        k, rows, cols = map(int, env.action_space.nvec)
        assert rows == cols, "Expected square grid"
        self.k = k
        self.size = rows
        self.n = int(k * self.size * self.size)
        self.action_space = spaces.Discrete(self.n)

    def _unflatten(self, idx: int) -> tuple[int, int, int]:
        slot, row, col = np.unravel_index(idx, (self.k, self.size, self.size))
        return int(slot), int(row), int(col)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self._unflatten(int(action)), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return flat_action_mask(self.env)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps a masked-out flat action for a random valid one.

    Lets vanilla PPO (no action masking) train without wasting steps on
    placements the board rejects. Wrap a FlattenDiscreteActionWrapper.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.Discrete), "flatten the action space first"

    def get_action_mask(self) -> np.ndarray:
        return flat_action_mask(self.env)

    def step(self, action):  # type: ignore[override]
        idx = int(action)
        mask = self.get_action_mask()
        if not (0 <= idx < mask.shape[0] and mask[idx]):
            valid = np.flatnonzero(mask)
            if valid.size > 0:
                idx = int(self.np_random.choice(valid))
        return self.env.step(idx)
