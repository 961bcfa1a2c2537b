from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, IO, Union

import yaml

from pyimgtools.images.pipeline import Pipeline
from pyimgtools.utils.exceptions import InputError

log = logging.getLogger(__name__)


def load_config(source: Union[str, Path, IO[str]]) -> Any:
    """Loads a YAML config from a file or a stream.

    Args:
        source: Filename or open stream.

    Returns:
        Parsed config.
    """
    try:
        if isinstance(source, (str, Path)):
            with open(source, "r") as f:
                return yaml.safe_load(f)
        return yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise InputError(f"Invalid YAML config: {e}")


def load_pipeline(source: Union[str, Path, IO[str]]) -> Pipeline:
    """Creates a pipeline from a YAML config.

    The config is either a list of step configs or a mapping with the list in a ``pipeline`` key:

    .. code-block:: yaml

        pipeline:
          - class: pyimgtools.images.processors.transform.Resize
            width: 640
            height_mode: auto
          - class: pyimgtools.images.processors.transform.Filter
            filter_type: sharpen

    Args:
        source: Filename or open stream.

    Returns:
        New pipeline.
    """
    config = load_config(source)
    if isinstance(config, dict):
        config = config.get("pipeline")
    if not isinstance(config, list):
        raise InputError("Pipeline config must be a list of steps.")
    log.info("Creating pipeline with %d steps.", len(config))
    return Pipeline(steps=config)


__all__ = ["load_config", "load_pipeline"]
