from typing import List, Optional, Pattern, Sequence, Tuple

from config import policy
from config.settings import settings
from utils.logger import get_logger

logger = get_logger(__name__)


class TextScanner:
    """
    Heuristic scan of the head of a text-like upload for injected script or
    code. Undecodable input counts as no match, never as an error.
    """

    def __init__(
        self,
        patterns: Sequence[Tuple[str, Pattern[str]]] = policy.SUSPICIOUS_PATTERNS,
        scan_limit: Optional[int] = None,
    ) -> None:
        self.patterns = tuple(patterns)
        self.scan_limit = scan_limit if scan_limit is not None else settings.TEXT_SCAN_LIMIT

    def scan(self, data: bytes) -> List[str]:
        try:
            text = bytes(data[:self.scan_limit]).decode("utf-8", errors="replace")
        except (TypeError, ValueError) as e:
            logger.debug(f"Text scan skipped, buffer not decodable: {e}")
            return []

        for label, pattern in self.patterns:
            if pattern.search(text):
                logger.debug(f"Suspicious pattern matched: {label}")
                return [f"Suspicious text content detected ({label})."]
        return []
