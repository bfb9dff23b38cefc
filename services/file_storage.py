import os
from pathlib import Path
from typing import Union

from utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class FileStorageService:
    """Picks collision-free names inside the received-files directory and writes accepted uploads."""

    MAX_ATTEMPTS = 10000

    @staticmethod
    def _candidate(desired_name: str, counter: int) -> str:
        if counter == 0:
            return desired_name
        stem, suffix = os.path.splitext(desired_name)
        return f"{stem}({counter}){suffix}"

    def next_available_name(self, directory: PathLike, desired_name: str) -> str:
        """
        Return desired_name if it is free in directory, otherwise the first free
        stem(n)suffix. Only probes; a concurrent writer may still take the name,
        use store() to reserve and write in one step.
        """
        folder = Path(directory)
        counter = 0
        while (folder / self._candidate(desired_name, counter)).exists():
            counter += 1
        return self._candidate(desired_name, counter)

    def store(self, directory: PathLike, desired_name: str, data: bytes) -> Path:
        folder = Path(directory)
        folder.mkdir(parents=True, exist_ok=True)

        for counter in range(self.MAX_ATTEMPTS):
            target = folder / self._candidate(desired_name, counter)
            try:
                # "x" fails if the name was taken, so reservation and write are atomic
                with open(target, "xb") as fh:
                    fh.write(data)
            except FileExistsError:
                continue
            logger.info("Stored upload | path=%s | bytes=%s", target, len(data))
            return target

        raise FileExistsError(f"No free name for {desired_name} in {folder}")
