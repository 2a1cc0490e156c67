from pathlib import Path


class ProjectRootNotFound(Exception):
    pass


def get_project_root_dir(marker: str = "pyproject.toml") -> Path:
    """
    Closest ancestor of this package's directory that contains marker.

    Raises:
        ProjectRootNotFound: When running from an installed copy without
            the source tree.
    """
    here = Path(__file__).resolve().parent
    for directory in (here, *here.parents):
        if (directory / marker).exists():
            return directory
    raise ProjectRootNotFound(f"No {marker} above {here}")
