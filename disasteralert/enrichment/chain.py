"""
Ordered provider fallback, shared by the geocoding and photo description chains.
"""

import asyncio
import logging
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

P = TypeVar("P")
R = TypeVar("R")


class ProviderChain(Generic[P, R]):
    """
    Tries providers strictly in order and stops at the first acceptable result.

    Each provider call runs in a worker thread and is bounded by its own
    timeout. A call that times out is abandoned: whatever it eventually
    returns is never read. Exceptions, timeouts and unacceptable results all
    advance to the next provider; nothing is retried.
    """

    def __init__(self, providers: Sequence[P], timeout_seconds: float = 30.0):
        self.providers: List[P] = list(providers)
        self.timeout_seconds = timeout_seconds

    @property
    def provider_names(self) -> List[str]:
        return [getattr(p, "name", type(p).__name__) for p in self.providers]

    async def first_success(
        self,
        invoke: Callable[[P], Optional[R]],
        accept: Callable[[R], bool],
        label: str = "",
    ) -> Tuple[Optional[R], Optional[str]]:
        """
        Run providers in order.

        Args:
            invoke: Blocking call made against one provider
            accept: Predicate a result must satisfy to end the chain
            label: Short description of the request, for logs

        Returns:
            (result, provider name) of the first success, or (None, None)
        """
        for provider in self.providers:
            name = getattr(provider, "name", type(provider).__name__)
            result = await self._call(provider, name, invoke, label)
            if result is not None and accept(result):
                logger.info(f"{name} succeeded{label}")
                return result, name
            if result is not None:
                logger.warning(f"{name} returned an unusable result{label}")

        return None, None

    async def _call(
        self,
        provider: P,
        name: str,
        invoke: Callable[[P], Optional[R]],
        label: str,
    ) -> Optional[Any]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(invoke, provider),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"{name} timed out after {self.timeout_seconds}s{label}")
        except Exception as e:
            logger.warning(f"{name} failed{label}: {type(e).__name__}: {e}")
        return None
