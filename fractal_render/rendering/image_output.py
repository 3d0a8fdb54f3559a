"""
Image export for rendered pixel buffers.

Encodes the renderer's flat RGB buffer as a PNG file and embeds the render
parameters as PNG text chunks.
"""

from typing import Dict, Any, Optional, Tuple, Union
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

from ..core.math_functions import Bounds

logger = logging.getLogger(__name__)

SOFTWARE_VERSION = "1.0.0"


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    # Fractal parameters
    fractal_type: str
    upper_left: Tuple[float, float]
    lower_right: Tuple[float, float]
    resolution: Tuple[int, int]  # width, height
    max_iterations: int
    color_palette: str

    # Timing and performance
    render_time_seconds: float = 0.0
    num_processes: int = 1
    aspect_corrected: bool = False

    # Generation info
    timestamp: str = ""
    software_version: str = SOFTWARE_VERSION

    # Fractal-specific parameters
    fractal_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        data = dict(data)
        for key in ('upper_left', 'lower_right', 'resolution'):
            if key in data:
                data[key] = tuple(data[key])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """PNG export of RGB pixel buffers."""

    supported_formats = ('.png',)

    def save_image(self, pixels: Union[bytes, bytearray, memoryview], bounds: Tuple[int, int],
                   filepath: Union[str, Path], metadata: Optional[RenderMetadata] = None,
                   compress_level: int = 6) -> Path:
        """
        Save a row-major RGB buffer to a PNG file.

        Args:
            pixels: Buffer of 3 * width * height bytes
            bounds: Image (width, height)
            filepath: Output file path
            metadata: Render metadata to embed
            compress_level: zlib level, 0 (none) to 9 (max)

        Returns:
            The path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()
        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats)
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        bounds = Bounds(*bounds)
        bounds.validate()
        expected = bounds.width * bounds.height * 3
        if len(pixels) != expected:
            raise ValueError(f"Pixel buffer holds {len(pixels)} bytes, expected {expected} "
                             f"for {bounds.width}x{bounds.height} RGB")

        pil_image = Image.frombytes('RGB', (bounds.width, bounds.height), bytes(pixels))

        pnginfo = PngImagePlugin.PngInfo()
        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.fractal_type}")
            pnginfo.add_text("Software", f"fractal-render v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text("FractalMetadata", metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo, compress_level=compress_level)

        logger.info(f"Saved image: {filepath} ({bounds.width}x{bounds.height})")
        return filepath

    @staticmethod
    def read_metadata(filepath: Union[str, Path]) -> Optional[RenderMetadata]:
        """Read back the metadata embedded by save_image, if any."""
        with Image.open(filepath) as img:
            text = img.text.get("FractalMetadata")
        if text is None:
            return None
        return RenderMetadata.from_json(text)
