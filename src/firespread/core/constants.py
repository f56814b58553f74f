# --- SIMULATION DEFAULTS ---
MAX_BURN_DURATION_STEPS = 5  # steps a point keeps burning
NEIGHBOR_SEARCH_RADIUS = 0.0006  # [deg]
INITIAL_FIRE_STARTS = 3
SPREAD_THRESHOLD = 0.525  # minimum decayed criticality that can spread
DECAY_RATE = 0.003  # fraction of criticality lost per step
MIN_DECAY_FACTOR = 0.1

# --- WIND ---
WIND_EFFECT_SCALER = 0.075
MAX_WIND_BONUS = 0.9
UPWIND_PENALTY_RATIO = 1.6

# --- RENDERING HINTS ---
MARKER_HALF_SIZE = 0.0003  # [deg]

# --- POINT STATES ---
UNBURNT = 0
BURNING = 1
BURNT_OUT = 2
