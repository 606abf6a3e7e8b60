"""
Image Processor Module.

Loads invoice photos and scans with Pillow and prepares them for OCR:
orientation is fixed from EXIF data and the image is converted to RGB.

Supports: JPG, JPEG, PNG

Author: ML Engineering Team
"""

import io
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from PIL import Image, ImageOps

from config import get_config
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image files.

    Attributes:
        auto_orient: Whether to auto-correct orientation

    Example:
        >>> processor = ImageProcessor()
        >>> image, metadata = processor.load("invoice.jpg")
    """

    def __init__(self, auto_orient: Optional[bool] = None) -> None:
        """Initialize the image processor with configuration."""
        if auto_orient is None:
            auto_orient = get_config("input.image.auto_orient", True)
        self.auto_orient = auto_orient

        logger.debug(f"ImageProcessor initialized (auto_orient={self.auto_orient})")

    def load(
        self,
        source: Union[str, Path, bytes],
        name: Optional[str] = None
    ) -> Tuple[Image.Image, Dict[str, Any]]:
        """
        Load an image for OCR.

        Args:
            source: Path to the image or its raw bytes.
            name: Display name for logs and errors.

        Returns:
            Tuple of (RGB PIL Image, metadata dictionary).

        Raises:
            CorruptedFileError: If the image cannot be decoded.
        """
        if isinstance(source, bytes):
            name = name or "upload"
            stream = io.BytesIO(source)
        else:
            name = name or Path(source).name
            stream = source

        logger.info(f"Processing image: {name}")

        try:
            image = Image.open(stream)
            image.load()
        except Exception as e:
            logger.error(f"Failed to process image {name}: {e}")
            raise CorruptedFileError(name, str(e))

        metadata = {
            'file_type': 'image',
            'format': image.format,
            'mode': image.mode,
            'original_width': image.width,
            'original_height': image.height,
        }

        if self.auto_orient:
            image = ImageOps.exif_transpose(image)
        if image.mode != 'RGB':
            image = image.convert('RGB')

        metadata['processed_width'] = image.width
        metadata['processed_height'] = image.height
        return image, metadata
