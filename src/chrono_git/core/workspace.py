"""On-disk workspace used by the command line to persist snapshots between runs."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from chrono_git import __version__
from chrono_git.core.config import EngineSettings, load_settings, save_settings
from chrono_git.core.engine import GitEngine
from chrono_git.core.network import RemoteNetwork
from chrono_git.core.repository import Repository
from chrono_git.errors import SnapshotError

logger = logging.getLogger(__name__)

WORKSPACE_DIR = ".chrono-git"


class Workspace:
    """A ``.chrono-git`` directory holding settings, the repository and the network."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.workspace_dir = self.root / WORKSPACE_DIR
        self.config_file = self.workspace_dir / "config.json"
        self.state_file = self.workspace_dir / "state.json"
        self.network_file = self.workspace_dir / "network.json"
        self.meta_file = self.workspace_dir / "meta.json"

    def exists(self) -> bool:
        return self.workspace_dir.exists() and self.state_file.exists()

    def init(self, force: bool = False) -> None:
        """Create a fresh workspace with an empty repository and network."""
        if self.exists() and not force:
            raise ValueError(
                f"Workspace already initialized in {self.root}. Use --force to start over."
            )
        self.workspace_dir.mkdir(parents=True, exist_ok=True)

        settings = load_settings(self.config_file) if self.config_file.exists() else EngineSettings()
        save_settings(settings, self.config_file)

        meta = {"version": __version__, "created": datetime.now().isoformat()}
        self.meta_file.write_text(json.dumps(meta, indent=2), encoding="utf-8")

        engine = GitEngine(settings=settings)
        self.save(engine)
        logger.info("Initialized workspace in %s", self.workspace_dir)

    def settings(self) -> EngineSettings:
        return load_settings(self.config_file)

    def load_network(self) -> RemoteNetwork:
        if not self.network_file.exists():
            return RemoteNetwork()
        return RemoteNetwork.from_json(self.network_file.read_text(encoding="utf-8"))

    def load_engine(self, settings: Optional[EngineSettings] = None) -> GitEngine:
        """Rebuild the engine from the saved snapshots.

        Raises:
            SnapshotError: if the saved state is missing or corrupt.
        """
        if not self.state_file.exists():
            raise SnapshotError(f"No repository state found in {self.workspace_dir}")
        repository = Repository.from_json(self.state_file.read_text(encoding="utf-8"))
        return GitEngine(
            repository=repository,
            network=self.load_network(),
            settings=settings or self.settings(),
        )

    def save(self, engine: GitEngine) -> None:
        self.state_file.write_text(engine.get_repository().to_json(), encoding="utf-8")
        self.network_file.write_text(engine.network.to_json(), encoding="utf-8")


def find_workspace(start: Optional[Path] = None) -> Optional[Workspace]:
    """Walk up from ``start`` (default: cwd) to the nearest initialized workspace."""
    current = Path(start or Path.cwd()).resolve()
    for directory in [current] + list(current.parents):
        workspace = Workspace(directory)
        if workspace.exists():
            return workspace
    return None
