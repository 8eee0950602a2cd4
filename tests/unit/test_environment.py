"""
Unit tests for the Gymnasium environment.
"""
import numpy as np
import pytest
from gymnasium.vector import AsyncVectorEnv, SyncVectorEnv
from sweeper import BoardConfig, MinesweeperEnv
from sweeper.environment import make_vec_env


class TestMinesweeperEnv:
    """Test the RL interface over the board."""

    def test_spaces_match_board(self) -> None:
        env = MinesweeperEnv(BoardConfig(8, 6, 5))
        assert env.observation_space.shape == (6, 8)
        assert env.action_space.n == 48

    def test_reset_returns_hidden_board(self) -> None:
        env = MinesweeperEnv()
        obs, info = env.reset(seed=3)
        assert obs.shape == (9, 9)
        assert np.all(obs == -1)
        assert info["game_state"] == "READY"
        assert info["valid_actions"] == 81

    def test_first_step_is_safe(self) -> None:
        env = MinesweeperEnv()
        env.reset(seed=3)
        obs, reward, terminated, truncated, info = env.step(40)
        assert reward in (1.0, 10.0)
        assert obs[4, 4] == 0
        assert truncated is False
        assert info["revealed"] >= 1

    def test_repeated_step_is_penalized(self) -> None:
        env = MinesweeperEnv()
        env.reset(seed=3)
        _, _, terminated, _, _ = env.step(40)
        if not terminated:
            _, reward, _, _, _ = env.step(40)
            assert reward == -0.1

    def test_hitting_mine_terminates(self) -> None:
        env = MinesweeperEnv()
        env.reset(seed=3)
        env.step(40)
        mine = env.board.mine_indexes[0]
        _, reward, terminated, _, info = env.step(mine)
        assert reward == -10.0
        assert terminated is True
        assert info["game_state"] == "LOST"

    def test_seeded_resets_repeat_layout(self) -> None:
        env = MinesweeperEnv()
        env.reset(seed=11)
        env.step(0)
        first = sorted(env.board.mine_indexes)
        env.reset(seed=11)
        env.step(0)
        assert sorted(env.board.mine_indexes) == first

    def test_action_mask(self) -> None:
        env = MinesweeperEnv()
        env.reset(seed=3)
        env.step(40)
        mask = env.get_action_mask()
        assert mask.dtype == bool
        assert mask[40] == False  # noqa: E712
        assert mask.sum() == len(env.board.get_valid_actions())

    def test_ansi_render(self) -> None:
        env = MinesweeperEnv(BoardConfig(3, 2, 1), render_mode="ansi")
        env.reset(seed=0)
        assert env.render() == ". . .\n. . ."


# ============================================================================
# Vectorized Environment Tests
# ============================================================================

class TestMakeVecEnv:
    """Test batching boards for parallel training."""

    def test_sync_batch_steps_together(self) -> None:
        envs = make_vec_env(2, BoardConfig(5, 4, 3), asynchronous=False)
        try:
            assert isinstance(envs, SyncVectorEnv)
            obs, info = envs.reset(seed=0)
            assert obs.shape == (2, 4, 5)
            assert obs.dtype == np.int8
            assert np.all(obs == -1)

            obs, rewards, terminated, truncated, info = envs.step(np.array([0, 0]))
            assert obs.shape == (2, 4, 5)
            assert rewards.shape == (2,)
            assert np.all(rewards > 0)
            assert not truncated.any()
        finally:
            envs.close()

    def test_copies_get_distinct_seeds(self) -> None:
        envs = make_vec_env(2, BoardConfig(8, 8, 20), asynchronous=False)
        try:
            envs.reset(seed=5)
            envs.step(np.array([0, 0]))
            first, second = (sorted(env.board.mine_indexes) for env in envs.envs)
            assert first != second
        finally:
            envs.close()

    def test_default_config(self) -> None:
        envs = make_vec_env(1, asynchronous=False)
        try:
            assert envs.single_observation_space.shape == (9, 9)
            assert envs.single_action_space.n == 81
        finally:
            envs.close()

    def test_async_batch(self) -> None:
        envs = make_vec_env(2, BoardConfig(3, 3, 1))
        try:
            assert isinstance(envs, AsyncVectorEnv)
            obs, _ = envs.reset(seed=1)
            assert obs.shape == (2, 3, 3)
        finally:
            envs.close()

    def test_empty_batch_raises(self) -> None:
        with pytest.raises(ValueError, match="n_envs must be positive"):
            make_vec_env(0)
