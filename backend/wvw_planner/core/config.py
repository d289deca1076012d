"""
Solver and simulation settings.

Values can be overridden through environment variables.
"""

import os


# Hard cap on the number of remaining skirmishes a solve may consider
MAX_EVENTS = 50

DEFAULT_MIN_MARGIN = int(os.getenv("DEFAULT_MIN_MARGIN", "1"))

# Exact solver budget (search nodes / wall clock seconds)
SOLVER_MAX_ITERATIONS = int(os.getenv("SOLVER_MAX_ITERATIONS", "200000"))
SOLVER_DEADLINE_SECONDS = float(os.getenv("SOLVER_DEADLINE_SECONDS", "2.0"))

# Random restart strategy
RANDOM_ATTEMPTS = int(os.getenv("RANDOM_ATTEMPTS", "200"))
RANDOM_ITERATIONS_PER_ATTEMPT = int(os.getenv("RANDOM_ITERATIONS_PER_ATTEMPT", "500"))

# Upper bound on passes of the scenario relaxation step
MAX_OPTIMIZATION_PASSES = 1000

MONTE_CARLO_ITERATIONS = int(os.getenv("MONTE_CARLO_ITERATIONS", "10000"))
MONTE_CARLO_MAX_ITERATIONS = 1_000_000

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
