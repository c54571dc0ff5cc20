# ABOUTME: Rotating client identities and browser-like request headers
# ABOUTME: The rotation cursor belongs to one rotator instance; racing callers only skew the distribution

import random
from collections.abc import Sequence

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Upgrade-Insecure-Requests": "1",
}


class UserAgentRotator:
    """Cycle through a pool of user agents starting from a random offset."""

    def __init__(self, user_agents: Sequence[str], rng: random.Random | None = None):
        if not user_agents:
            raise ValueError("At least one user agent is required")
        self._agents = tuple(user_agents)
        self._cursor = (rng or random.Random()).randrange(len(self._agents))

    def __len__(self) -> int:
        return len(self._agents)

    def next(self) -> str:
        agent = self._agents[self._cursor]
        self._cursor = (self._cursor + 1) % len(self._agents)
        return agent

    def headers(self) -> dict[str, str]:
        """Anti-block header set carrying the next identity."""
        return {**BASE_HEADERS, "User-Agent": self.next()}
