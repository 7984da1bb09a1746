# "converge" writes Newton steps and the root / octant bucket per pixel,
# both -1 where the budget ran out first. Order, offset and epsilon come
# from the NewtonFractal and its RenderSettings.
