#!/usr/bin/env python
"""
Simulate rating data from preset generation configurations.

Generates CSV files for each non-empty configuration in synthetic_data/params/.
Output files are written to data/synthetic/{preset_name}.csv, with person
covariates in data/synthetic/{preset_name}_covariates.csv and the generating
parameters in data/synthetic/{preset_name}_parameters.json.
"""

import logging
from pathlib import Path

import typer

from ratingscale.synthetic_data.generators import generate_responses, to_csv
from ratingscale.synthetic_data.presets import PARAMS_DIR, get_preset

SYNTHETIC_DATA_DIR = Path(__file__).parent.parent / "data" / "synthetic"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("simulate_data")


def get_non_empty_presets() -> list[str]:
    """Return preset names for YAML files that are non-empty."""
    presets = []
    for path in PARAMS_DIR.glob("*.yaml"):
        if path.read_text().strip() != "":
            presets.append(path.stem)
    return sorted(presets)


def main(
    preset: str | None = None,
    output_dir: Path = SYNTHETIC_DATA_DIR,
) -> int:
    """Generate CSV files for one preset, or all non-empty presets."""
    output_dir.mkdir(parents=True, exist_ok=True)

    if preset is None:
        presets = get_non_empty_presets()
        if not presets:
            raise FileNotFoundError("No non-empty preset configurations found")
        logger.info("Found %d non-empty presets: %s", len(presets), presets)
    else:
        logger.info(f"Generating synthetic data for preset {preset}")
        presets = [preset]

    for preset_name in presets:
        output_path = output_dir / f"{preset_name}.csv"
        covariates_path = output_dir / f"{preset_name}_covariates.csv"
        params_path = output_dir / f"{preset_name}_parameters.json"
        logger.info("Generating %s -> %s", preset_name, output_path)

        config = get_preset(preset_name)
        generated = generate_responses(config)
        to_csv(generated, output_path, covariates_path=covariates_path)
        params_path.write_text(generated.parameters.model_dump_json(indent=4))

        logger.info(
            "  Generated %d persons, %d items, %d categories (%s)",
            config.n_persons,
            config.n_items,
            config.n_categories,
            config.model,
        )

    logger.info("Done. Generated %d datasets in %s", len(presets), output_dir)
    return 0


if __name__ == "__main__":
    typer.run(main)
