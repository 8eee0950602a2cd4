"""
Gymnasium environment wrapper for Minesweeper.

Provides a standard RL interface over the board engine.
"""
from functools import partial
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .board import Board, BoardConfig, CellAction
from .utils import render_text


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for Minesweeper.

    Observation:
        2D array where:
        - -1 = covered cell
        - -2 = flagged cell
        - 0-8 = opened cell with neighbor mine count
        - 9 = opened mine

    Actions:
        Discrete action space of size width * height.
        Action i opens the cell with flat index i (x + y * width).

    Rewards:
        - +1 for opening a safe cell
        - +10 for winning the game
        - -10 for hitting a mine
        - -0.1 for an action with no effect
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Minesweeper environment.

        Args:
            config: Board configuration (default: 9x9 with 10 mines).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.config = config or BoardConfig()
        self.board = Board(self.config)
        self.render_mode = render_mode

        self.observation_space = spaces.Box(
            low=-2,
            high=9,
            shape=(self.config.height, self.config.width),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(self.config.total_cells)

        self._steps = 0
        self._total_safe_cells = self.config.total_cells - self.config.num_mines

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new episode.

        Args:
            seed: Random seed for mine placement.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self.board = Board(self.config, seed=seed)
        else:
            self.board.init(self.config)
        self._steps = 0

        return self.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Flat index of the cell to open.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        self._steps += 1
        reward = self._calculate_reward(int(action))

        observation = self.board.get_observation()
        terminated = self.board.is_over
        truncated = False

        return observation, reward, terminated, truncated, self._get_info()

    def _calculate_reward(self, index: int) -> float:
        """Open a cell and score the outcome."""
        if not self.board.operate(index, CellAction.OPEN):
            return -0.1
        if self.board.is_won:
            return 10.0
        if self.board.is_lost:
            return -10.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        revealed = sum(
            1 for cell in self.board.cells if cell.open and not cell.mine
        )
        return {
            "steps": self._steps,
            "revealed": revealed,
            "total_safe": self._total_safe_cells,
            "game_state": self.board.stage.name,
            "valid_actions": len(self.board.get_valid_actions()),
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return render_text(self.board)
        if self.render_mode == "human":
            print(render_text(self.board))
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of valid actions.

        Returns:
            Boolean array where True = valid action.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        mask[self.board.get_valid_actions()] = True
        return mask


# ============================================================================
# Vectorized Environment Factory
# ============================================================================

def make_vec_env(
    n_envs: int = 4,
    config: Optional[BoardConfig] = None,
    asynchronous: bool = True,
    render_mode: Optional[str] = None,
) -> gym.vector.VectorEnv:
    """
    Create a batch of boards that step together.

    Every copy shares one board configuration. Seeding the batch with
    `reset(seed=s)` gives copy i the seed s + i, so layouts differ
    between copies but repeat between runs.

    Args:
        n_envs: Number of boards in the batch.
        config: Board configuration for every copy.
        asynchronous: Step each board in its own subprocess; set False
            to step them in-process, one after another.
        render_mode: Passed to each MinesweeperEnv.

    Returns:
        Vectorized environment with observations of shape
        (n_envs, height, width).
    """
    if n_envs < 1:
        raise ValueError("n_envs must be positive")

    config = config or BoardConfig()
    env_fns = [
        partial(MinesweeperEnv, config=config, render_mode=render_mode)
        for _ in range(n_envs)
    ]
    if asynchronous:
        return gym.vector.AsyncVectorEnv(env_fns)
    return gym.vector.SyncVectorEnv(env_fns)
