"""Contact sheet composition - tile screenshots into one image."""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

from routelens.config import GridConfig


class CompositionError(RuntimeError):
    """Contact sheet could not be composed or written."""


@dataclass(frozen=True)
class GridLayout:
    """Row-major layout of equally sized cells."""

    count: int
    columns: int
    cell_width: int
    cell_height: int

    @property
    def rows(self) -> int:
        return math.ceil(self.count / self.columns)

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.columns * self.cell_width, self.rows * self.cell_height

    def cell(self, index: int) -> tuple[int, int]:
        """Return (row, column) of the image at index."""
        return index // self.columns, index % self.columns

    def offset(self, index: int) -> tuple[int, int]:
        """Return the (left, top) pixel offset of the image at index."""
        row, col = self.cell(index)
        return col * self.cell_width, row * self.cell_height


class GridComposer:
    """Tile screenshots into a single contact sheet.

    Every image is resized to ``target_width`` keeping its aspect ratio and
    padded by ``padding`` pixels on the right and bottom. The first image
    fixes the cell size. Later images are fitted to it top-anchored:
    taller ones are cropped at the bottom, shorter ones are padded.
    """

    def __init__(self, config: Optional[GridConfig] = None):
        """Initialize grid composer.

        Args:
            config: Layout settings.
        """
        self.config = config or GridConfig()

    def compose(self, image_paths: list[str], output_path: Path | str) -> Optional[str]:
        """Compose images into a contact sheet.

        Args:
            image_paths: Screenshot files, in display order.
            output_path: Destination image path.

        Returns:
            Path to the written image, or None if there was nothing to compose.

        Raises:
            CompositionError: If an image cannot be read or the sheet written.
        """
        if not image_paths:
            return None

        output_path = Path(output_path)

        try:
            first = self._prepare(image_paths[0])
            layout = GridLayout(
                count=len(image_paths),
                columns=self.config.columns,
                cell_width=first.width,
                cell_height=first.height,
            )

            canvas = Image.new("RGB", layout.canvas_size, self.config.background)
            canvas.paste(first, layout.offset(0))

            for index, path in enumerate(image_paths[1:], start=1):
                cell = self._fit(self._prepare(path), layout)
                canvas.paste(cell, layout.offset(index))

            output_path.parent.mkdir(parents=True, exist_ok=True)
            canvas.save(output_path)
        except CompositionError:
            raise
        except Exception as e:
            raise CompositionError(f"Failed to compose grid: {e}") from e

        return str(output_path)

    def _prepare(self, path: str) -> Image.Image:
        """Resize an image to the target width and pad it."""
        try:
            with Image.open(path) as img:
                img = img.convert("RGB")
        except Exception as e:
            raise CompositionError(f"Cannot read {path}: {e}") from e

        width = self.config.target_width
        height = max(1, round(img.height * width / img.width))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)

        padding = self.config.padding
        padded = Image.new("RGB", (width + padding, height + padding), self.config.background)
        padded.paste(resized, (0, 0))
        return padded

    def _fit(self, image: Image.Image, layout: GridLayout) -> Image.Image:
        if image.size == (layout.cell_width, layout.cell_height):
            return image

        padding = self.config.padding
        content = image.crop(
            (0, 0, image.width - padding, min(image.height, layout.cell_height) - padding)
        )
        cell = Image.new("RGB", (layout.cell_width, layout.cell_height), self.config.background)
        cell.paste(content, (0, 0))
        return cell


def create_grid(
    image_paths: list[str],
    output_path: Path | str,
    columns: int = 3,
    padding: int = 20,
) -> Optional[str]:
    """Quick contact sheet creation.

    Args:
        image_paths: Screenshot files.
        output_path: Destination image path.
        columns: Number of columns.
        padding: Padding in pixels.

    Returns:
        Path to the written image, or None for an empty input.
    """
    return GridComposer(GridConfig(columns=columns, padding=padding)).compose(
        image_paths, output_path
    )
