from __future__ import annotations

import argparse
import random
from typing import Optional

import gymnasium as gym

from block_blast.env import ENV_ID  # registers the env


def run_random(steps: int = 200, seed: Optional[int] = None) -> float:
    rng = random.Random(seed)
    env = gym.make(ENV_ID)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    best = 0
    for _ in range(steps):
        valid = env.unwrapped.game.get_valid_actions()
        if valid:
            action = rng.choice(valid)
        else:
            action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            best = max(best, int(info["score"]))
            episodes += 1
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}  episodes: {episodes}  best score: {best}")
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    run_random(args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
