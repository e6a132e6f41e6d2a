from pathlib import Path
from typing import Dict, Optional

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


class FakeTTLStore:
    """In-memory stand-in for the Redis calls the rate limiter makes."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {}
        self.expiries: Dict[str, int] = {}

    async def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    async def setex(self, name: str, time: int, value: str) -> bool:
        self.values[name] = value
        self.expiries[name] = time
        return True

    async def ttl(self, name: str) -> int:
        if name not in self.values:
            return -2
        return self.expiries.get(name, -1)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def store() -> FakeTTLStore:
    return FakeTTLStore()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES
