import numpy as np
from scipy.interpolate import interp1d


def apply_gamma_correction(palette: np.ndarray, gamma=0.8) -> np.ndarray:
    """
    Applies gamma correction to a palette to increase contrast.

    Parameters:
        palette (ndarray): (N, 3) RGB values in 0-255.
        gamma (float): Gamma value (<1 brightens, >1 darkens).

    Returns:
        ndarray: Gamma-corrected palette, same shape.
    """
    return 255.0 * (np.clip(palette, 0, 255) / 255.0) ** gamma


def create_smooth_gradient(stops, resolution=256, interpolation='cubic',
                           gamma=0.8) -> np.ndarray:
    """
    Generates a smooth gradient from a list of RGB stops.

    Parameters:
        stops (list of tuple): RGB tuples (each value 0-255) defining the base colors.
        resolution (int): Number of colors in the output gradient.
        interpolation (str): Interpolation method ('linear', 'quadratic', 'cubic', ...).
        gamma (float): Gamma applied after interpolation.

    Returns:
        ndarray: uint8 array of shape (resolution, 3), read-only.
    """
    if len(stops) < 2:
        raise ValueError("Palette must contain at least two colors for interpolation.")
    if interpolation == 'cubic' and len(stops) < 4:
        interpolation = 'linear'

    stops = np.array(stops, dtype=np.float64)
    indices = np.linspace(0, len(stops) - 1, num=len(stops))
    interp_func = interp1d(indices, stops, kind=interpolation, axis=0)
    smooth = interp_func(np.linspace(0, len(stops) - 1, num=resolution))
    smooth = apply_gamma_correction(smooth, gamma)
    gradient = np.clip(np.rint(smooth), 0, 255).astype(np.uint8)
    gradient.flags.writeable = False
    return gradient


# Define base palettes
base_palettes = {
    "Fire": create_smooth_gradient([
        (0, 0, 0), (255, 0, 0), (255, 85, 0), (255, 170, 0),
        (255, 255, 0), (255, 255, 85), (255, 255, 170)]),

    "Ocean": create_smooth_gradient([
        (0, 0, 0), (0, 32, 64), (0, 64, 128), (0, 96, 192),
        (0, 128, 255), (64, 160, 255), (128, 192, 255)]),

    "Classic": create_smooth_gradient([
        (66, 30, 15), (25, 7, 26), (9, 1, 47), (4, 4, 73),
        (0, 7, 100), (12, 44, 138), (24, 82, 177), (57, 125, 209),
        (134, 181, 229), (211, 236, 248), (241, 233, 191), (248, 201, 95),
        (255, 170, 0), (204, 128, 0), (153, 87, 0), (106, 52, 3)]),

    "Viridis": create_smooth_gradient([
        (68, 1, 84), (59, 82, 139), (33, 145, 140),
        (94, 201, 98), (253, 231, 37)]),

    "Grayscale": create_smooth_gradient([
        (32, 32, 32), (255, 255, 255)], interpolation='linear', gamma=1.0),
}

# Export palettes dictionary
palettes = {name: base_palettes[name] for name in sorted(base_palettes)}


def get_palette(name: str) -> np.ndarray:
    try:
        return palettes[name]
    except KeyError:
        raise KeyError(f"Unknown palette '{name}'; choose from {', '.join(palettes)}") from None
