"""Training-program engine for structured rucking programs."""
