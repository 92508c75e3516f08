import logging
from typing import List, Optional

from console_errors import ConsoleError
from engine_models import Partition

logger = logging.getLogger(__name__)


class PartitionFetcher:
    """Loads the partition list of the selected disk.

    Each fetch takes a new generation number; a response is committed only if
    its generation is still the latest one dispatched, so a slow reply for an
    earlier disk can never replace the list of the disk selected after it.
    """

    def __init__(self, client):
        self.client = client
        self.partitions: List[Partition] = []
        self.disk_path: Optional[str] = None
        self.error: Optional[str] = None
        self.loading = False
        self._generation = 0

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def fetch_partitions(self, disk_path: str) -> bool:
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None

        try:
            partitions = await self.client.disk_partitions(disk_path)
        except ConsoleError as exc:
            if not self._is_current(generation):
                logger.debug("dropping stale failure for %s", disk_path)
                return False
            self.loading = False
            # the previous list stays on display
            self.error = str(exc)
            logger.warning("partition fetch for %s failed: %s", disk_path, exc)
            return False

        if not self._is_current(generation):
            logger.debug("dropping stale partitions for %s", disk_path)
            return False

        self.loading = False
        self.partitions = partitions
        self.disk_path = disk_path
        logger.info("%d partition(s) loaded for %s", len(partitions), disk_path)
        return True

    def find(self, name: str) -> Optional[Partition]:
        for partition in self.partitions:
            if partition.name == name:
                return partition
        return None
