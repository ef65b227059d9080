"""Engine logic: weather suitability, generation, scoring and the recommendation pipeline."""
