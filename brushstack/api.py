from __future__ import annotations

from pathlib import Path

from .config import LayerConfig, OutputPathAllocator, default_output_dir
from .layer import Layer
from .persistence import PersistenceSink
from .raster.color import ColorLike, parse_color


def new_layer(
    name: str,
    width: int,
    height: int,
    *,
    background: ColorLike = (0, 0, 0, 0),
    output_dir: str | Path | None = None,
    allocator: OutputPathAllocator | None = None,
    sink: PersistenceSink | None = None,
    job_timeout_s: float | None = None,
    save_timeout_s: float | None = None,
) -> Layer:
    config = LayerConfig(
        width=width,
        height=height,
        background=parse_color(background),
        output_dir=Path(output_dir) if output_dir is not None else default_output_dir(),
        job_timeout_s=job_timeout_s,
        save_timeout_s=save_timeout_s,
    )
    return Layer.from_config(name, config, allocator=allocator, sink=sink)
