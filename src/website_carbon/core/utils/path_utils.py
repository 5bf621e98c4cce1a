# src/website_carbon/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_content_root() -> Path:
        """
        Returns the directory holding the top-level packages
        (the 'src' directory in a source checkout, 'site-packages' when installed).
        """
        return Path(__file__).resolve().parents[3]

    @staticmethod
    def get_app_package_root() -> Path:
        return PathUtils.get_content_root() / "website_carbon"

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_app_package_root() / "settings.json"

    # --- User specific paths ---

    @staticmethod
    def get_user_documents_dir() -> Path:
        """
        Returns the absolute path to the current user's Documents directory.
        """
        return Path.home() / "Documents"

    # --- Helper methods ---

    @staticmethod
    def resolve_export_path(raw_path: str) -> Path:
        """
        Resolves an export target. Relative paths land in the Documents folder,
        absolute paths are used as given. Parent directories are created.
        """
        path = Path(raw_path).expanduser()
        if not path.is_absolute():
            path = PathUtils.get_user_documents_dir() / path
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
