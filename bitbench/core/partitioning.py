"""
Per-agent id-space partitioning.

The agent-controls mode decides how adding agents changes each agent's work:
- height: each agent gets its own slab of bitmap ids
- width: each agent gets its own slab of profile ids
- none (""): every agent shares the full ranges

In all modes the seed is offset by the agent number.
"""

from dataclasses import dataclass
from enum import Enum

from bitbench.core.errors import ConfigurationError


class AgentControls(str, Enum):
    """How agent count modulates the generated id space."""

    HEIGHT = "height"
    WIDTH = "width"
    NONE = ""

    @classmethod
    def parse(cls, value: "AgentControls | str | None") -> "AgentControls":
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"agent-controls: '{value}' is not supported"
            ) from None


@dataclass(frozen=True)
class AgentPartition:
    """Id ranges and seed assigned to one agent."""

    agent_num: int
    base_bitmap_id: int
    max_bitmap_id: int
    base_profile_id: int
    max_profile_id: int
    seed: int


def partition_for_agent(
    mode: AgentControls,
    agent_num: int,
    base_bitmap_id: int,
    max_bitmap_id: int,
    base_profile_id: int,
    max_profile_id: int,
    seed: int,
) -> AgentPartition:
    """Shift the configured ranges for `agent_num` according to `mode`."""
    if agent_num < 0:
        raise ConfigurationError(f"agent number must be >= 0, got {agent_num}")

    if mode == AgentControls.HEIGHT:
        width = max_bitmap_id - base_bitmap_id
        base_bitmap_id = base_bitmap_id + width * agent_num
        max_bitmap_id = base_bitmap_id + width
    elif mode == AgentControls.WIDTH:
        width = max_profile_id - base_profile_id
        base_profile_id = base_profile_id + width * agent_num
        max_profile_id = base_profile_id + width

    return AgentPartition(
        agent_num=agent_num,
        base_bitmap_id=base_bitmap_id,
        max_bitmap_id=max_bitmap_id,
        base_profile_id=base_profile_id,
        max_profile_id=max_profile_id,
        seed=seed + agent_num,
    )
