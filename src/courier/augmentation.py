"""Extensibility pipeline for outgoing authorization response parameters."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from courier.models.errors import AugmentationError
from courier.models.result import AuthorizationResult

logger = logging.getLogger(__name__)


class QueryAugmenter(Protocol):
    """Adds or rewrites parameters of an outgoing authorization response.

    Implementations are registered once at startup and may read the full
    result alongside the parameters gathered so far.
    """

    async def augment(
        self, result: AuthorizationResult, parameters: dict[str, str]
    ) -> None:
        """Mutate ``parameters`` in place.

        Args:
            result: The authorization result being delivered
            parameters: Outgoing parameters, including earlier augmentations
        """
        ...


def augmenter_name(augmenter: QueryAugmenter) -> str:
    return getattr(augmenter, "name", None) or type(augmenter).__name__


class QueryAugmentationPipeline:
    """Runs registered augmenters one after another in registration order.

    Each augmenter sees the effects of every augmenter registered before
    it, so later augmenters win on overlapping keys.
    """

    def __init__(self, augmenters: Iterable[QueryAugmenter] = ()):
        self._augmenters: tuple[QueryAugmenter, ...] = tuple(augmenters)

    @property
    def augmenters(self) -> tuple[QueryAugmenter, ...]:
        return self._augmenters

    def __len__(self) -> int:
        return len(self._augmenters)

    async def augment(
        self, result: AuthorizationResult, parameters: dict[str, str]
    ) -> dict[str, str]:
        """Apply every augmenter to ``parameters`` and return the same dict.

        Raises:
            AugmentationError: If any augmenter fails; later ones don't run
        """
        for augmenter in self._augmenters:
            name = augmenter_name(augmenter)
            try:
                await augmenter.augment(result, parameters)
            except Exception as e:
                logger.error(f"Query augmenter {name} failed: {e}")
                raise AugmentationError(
                    f"Query augmenter {name} failed: {e}", augmenter=name
                ) from e
            logger.debug(f"Applied query augmenter {name}")

        return parameters
