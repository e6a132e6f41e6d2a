"""Ordered steps over a shared per-attempt fetch context."""

from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..errors import UnprocessedPipelineError
from .models import FetchResponse

Next = Callable[[], Awaitable[None]]


class FetchContext:
    """State shared by the steps of one fetch attempt."""

    def __init__(self, url: str, redirects: int = 0) -> None:
        self.url = url
        self.redirects = redirects
        self.response: Optional[FetchResponse] = None
        self.error: Optional[BaseException] = None
        self.result: Optional[Any] = None


Step = Callable[[FetchContext, Next], Awaitable[None]]


class Pipeline:
    """
    Runs steps in order; each step receives the context and a ``next`` callable.

    A step either does its work and awaits ``next``, raises to abort the attempt,
    or, when ``context.result`` is already set, only awaits ``next``.
    """

    def __init__(self, steps: Sequence[Step]) -> None:
        self.steps: List[Step] = list(steps)

    async def run(self, context: FetchContext) -> Any:
        """
        Run every step against ``context``.

        Returns:
            ``context.result`` once all steps ran.

        Raises:
            The stored ``context.error`` when there is no result, otherwise
            ``UnprocessedPipelineError`` carrying the HTTP status.
        """
        index = 0

        async def next_step() -> None:
            nonlocal index
            if index >= len(self.steps):
                return
            step = self.steps[index]
            index += 1
            await step(context, next_step)

        await next_step()

        if context.result is not None:
            return context.result
        if context.error is not None:
            raise context.error
        raise UnprocessedPipelineError(context.response.status if context.response else None)
