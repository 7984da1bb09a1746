from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Union

import numpy as np
from PIL import Image

from fractals.base import RasterDimensions
from rendering.errors import PreconditionError

logger = logging.getLogger(__name__)

_MODES = {1: "L", 3: "RGB"}


class SinkError(RuntimeError):
    """Encoding or writing the image failed; the pixel buffer is unaffected."""


def ndarray_to_image(buffer: np.ndarray, dims: RasterDimensions) -> Image.Image:
    """
    Wraps a uint8 buffer of width*height*channels samples (flat or shaped)
    as an 8-bit grayscale or RGB Pillow image.
    """
    buffer = np.asarray(buffer)
    if buffer.dtype != np.uint8:
        raise PreconditionError(f"Image buffer must be uint8, got {buffer.dtype}.")
    channels, rest = divmod(buffer.size, dims.pixels)
    if rest or channels not in _MODES:
        raise PreconditionError(
            f"Image buffer holds {buffer.size} samples, not {dims.pixels} "
            f"pixels of 1 or 3 channels for {dims}.")
    image = Image.fromarray(np.ascontiguousarray(buffer).reshape(dims.shape(channels)))
    if image.mode != _MODES[channels]:
        image = image.convert(_MODES[channels])
    return image


class ImageSink(ABC):
    """Persists a finished pixel buffer."""

    @abstractmethod
    def write(self, buffer: np.ndarray, dims: RasterDimensions) -> None:
        ...


class PillowImageSink(ImageSink):
    """
    Writes a lossless image through Pillow. The format follows the file
    extension unless given explicitly; file objects default to PNG.
    """

    def __init__(self, target: Union[str, os.PathLike, BinaryIO],
                 image_format: Optional[str] = None) -> None:
        self.target = target
        if image_format is None and not isinstance(target, (str, os.PathLike)):
            image_format = "PNG"
        self.image_format = image_format

    def write(self, buffer: np.ndarray, dims: RasterDimensions) -> None:
        image = ndarray_to_image(buffer, dims)
        try:
            image.save(self.target, format=self.image_format)
        except (OSError, ValueError, KeyError) as e:
            raise SinkError(f"Failed to write {dims} image to {self.target!r}: {e}") from e
        logger.info("Saved %s %s image to %s", dims, image.mode, self.target)
