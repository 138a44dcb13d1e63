"""Default market and company pipelines."""

from importlib import resources
from pathlib import Path

from topazsim.core.pipeline import Pipeline


def create_default_pipelines() -> tuple[Pipeline, Pipeline]:
    """
    Create the default ``(market, company)`` event pipelines.

    Loads both from the package's default_pipeline.yml.

    Notes
    -----
    Users can modify the returned pipelines with insert_after(), remove()
    and replace(), or supply their own file through the ``pipeline_path``
    configuration key.
    """
    # Importing the events package registers every stage
    import topazsim.events  # noqa: F401

    traversable = resources.files("topazsim") / "default_pipeline.yml"
    with resources.as_file(traversable) as yaml_fs_path:
        path = Path(yaml_fs_path)
        return (
            Pipeline.from_yaml(path, "market"),
            Pipeline.from_yaml(path, "company"),
        )
