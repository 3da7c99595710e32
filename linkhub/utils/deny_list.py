"""File-backed deny-list of client addresses."""

from pathlib import Path

from linkhub.logging import logger


class DenyList:
    """
    Reloadable set of addresses that are always refused at admission.

    The backing file holds one address per line; blank lines and lines
    starting with '#' are ignored. The file is read on every check so edits
    take effect immediately. A missing file is an empty deny-list.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> set[str]:
        """
        Read the deny-list file.

        Returns:
            Set of denied addresses; empty if the file is missing or unreadable.
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return set()
        except OSError as ex:
            logger.error(f"Could not read deny-list {self.path}: {ex}")
            return set()

        return {
            line.strip()
            for line in content.splitlines()
            if line.strip() and not line.strip().startswith("#")
        }

    def is_denied(self, address: str | None) -> bool:
        """
        Check whether an address is on the deny-list.

        Args:
            address: Resolved client address.

        Returns:
            True if the address is listed. None is never listed.
        """
        if not address:
            return False
        return address in self.load()
