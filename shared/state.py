"""Process-lifetime state owned by the agent loop."""
from dataclasses import dataclass


@dataclass
class AgentState:
    """Timers and the running flag shared across iterations.

    Timestamps are epoch seconds. They live in memory only, so a restart
    makes the digest and tip gates eligible again on the first iteration.
    """
    last_digest_at: float = 0.0
    last_tip_at: float = 0.0
    running: bool = False
