from kernel_sources.registry import register_op_descriptor

# "escape" writes the escape iteration per pixel, -1 for interior points.
# Bailout is the squared escape radius (radius 2).
register_op_descriptor(
    "mandelbrot", "escape",
    default_params={"bailout": 4.0}
)
