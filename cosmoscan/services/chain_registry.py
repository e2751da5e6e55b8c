"""Endpoint catalog: chain profiles loaded from chain JSON files."""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from cosmoscan.core.exceptions import UnknownChainError
from cosmoscan.models.chain import ChainProfile

logger = logging.getLogger(__name__)


def _slug(value: str) -> str:
    return value.strip().lower().replace(" ", "-")


class ChainRegistry:
    """Read-only catalog of chain profiles, looked up by name, id or file stem."""

    def __init__(self, profiles: Iterable[ChainProfile] = ()) -> None:
        self._profiles: dict[str, ChainProfile] = {}
        self._aliases: dict[str, str] = {}
        for profile in profiles:
            self.add(profile)

    def add(self, profile: ChainProfile, *aliases: str) -> None:
        key = _slug(profile.name)
        self._profiles[key] = profile
        for alias in (profile.configured_chain_id, *aliases):
            self._aliases[_slug(alias)] = key

    @classmethod
    def from_directory(cls, path: Path | str) -> "ChainRegistry":
        """
        Load every ``*.json`` chain file in a directory.

        Files that fail to parse are logged and skipped.

        Args:
            path: Directory of chain files.

        Returns:
            The populated registry.
        """
        registry = cls()
        directory = Path(path)
        if not directory.is_dir():
            logger.warning(f"[ChainRegistry] Chains directory {directory} does not exist")
            return registry

        for file in sorted(directory.glob("*.json")):
            try:
                data: dict[str, Any] = json.loads(file.read_text(encoding="utf-8"))
                profile = ChainProfile.from_chain_json(data)
            except (OSError, ValueError, KeyError) as e:
                logger.error(f"[ChainRegistry] Skipping {file.name}: {e}")
                continue
            registry.add(profile, file.stem)

        logger.info(f"[ChainRegistry] Loaded {len(registry)} chains from {directory}")
        return registry

    def get(self, chain: str) -> ChainProfile:
        """
        Look up a chain profile.

        Raises:
            UnknownChainError: If the chain is not in the catalog.
        """
        key = _slug(chain)
        key = key if key in self._profiles else self._aliases.get(key, key)
        profile = self._profiles.get(key)
        if profile is None:
            raise UnknownChainError(chain)
        return profile

    def list(self) -> list[ChainProfile]:
        return list(self._profiles.values())

    def __contains__(self, chain: str) -> bool:
        try:
            self.get(chain)
        except UnknownChainError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._profiles)
