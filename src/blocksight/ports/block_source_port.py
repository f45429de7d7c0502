from __future__ import annotations

from abc import ABC, abstractmethod

from blocksight.core.dto import BlockRecord


class BlockSourcePort(ABC):
    """
    Abstract Class for the remote block provider.
    """

    # --- Full block with transaction objects ---

    @abstractmethod
    def fetch_block(self, block_number: int) -> BlockRecord:
        """
        One request per call, no retries.

        Raises ConfigurationMissing, UpstreamUnavailable, UpstreamRejected or NotFound.
        """
        raise NotImplementedError
