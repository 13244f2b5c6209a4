from Seismos.profiling.timer import Timer

# Process-wide timer shared by all components
timer = Timer()
