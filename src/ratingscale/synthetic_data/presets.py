"""
Preset generation profiles for common rating scale scenarios.

Each preset is a YAML file in params/ merged onto GenerationConfig. A path
to any other YAML file with the same fields is accepted wherever a preset
name is.
"""

from pathlib import Path

from ratingscale.synthetic_data.config import GenerationConfig
from ratingscale.synthetic_data.parameters import load_config

PARAMS_DIR = Path(__file__).parent / "params"


def get_available_presets() -> list[str]:
    """Names of the bundled non-empty presets."""
    return sorted(
        path.stem
        for path in PARAMS_DIR.glob("*.yaml")
        if path.read_text().strip()
    )


def get_preset(name: str) -> GenerationConfig:
    """
    Load a bundled preset by name, or a YAML file by path.

    Raises:
        ValueError: If name is neither a bundled preset nor a .yaml path.
        FileNotFoundError: If name is a .yaml path that does not exist.
    """
    if name.endswith((".yaml", ".yml")):
        return load_config(Path(name))
    config_path = PARAMS_DIR / f"{name}.yaml"
    if not config_path.exists():
        raise ValueError(
            f"Unknown preset: {name}. "
            f"Available presets: {get_available_presets()}"
        )
    return load_config(config_path)
